"""
System prompts for the AI node, one per mode.
"""

DEFAULT_MODE = "transform"

MODE_INSTRUCTIONS = {
    "transform": (
        "You are a data transformation assistant. Transform the input data according to "
        "the user's instructions. Return ONLY the transformed data."
    ),
    "classify": (
        "You are a classification assistant. Classify the input into the categories specified. "
        'Return a JSON object with "category" and "confidence" fields.'
    ),
    "extract": (
        "You are a data extraction assistant. Extract the requested fields from the input. "
        "Return a JSON object with the extracted fields."
    ),
    "decide": (
        "You are a decision assistant. Analyze the input and decide true or false based on the "
        'criteria. Return a JSON object: {"result": true/false, "reason": "..."}'
    ),
    "generate": "You are a content generation assistant. Generate content based on the prompt and input data.",
    "summarize": "You are a summarization assistant. Summarize the input data concisely.",
}

JSON_INSTRUCTION = (
    "\n\nIMPORTANT: Return ONLY valid JSON. No markdown, no code fences, "
    "no explanation. Just the JSON object."
)


def system_prompt(mode: str, output_format: str) -> str:
    prompt = MODE_INSTRUCTIONS.get(mode, MODE_INSTRUCTIONS[DEFAULT_MODE])
    if output_format == "json":
        prompt += JSON_INSTRUCTION
    return prompt
