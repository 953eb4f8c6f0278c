SYSTEM_PROMPT = """\
You are executing a markdownlang program called "{NAME}". \
{DESCRIPTION} \
Follow the instructions precisely and return the result as JSON matching the required output schema. \
Be precise and deterministic. Do not add extra commentary, just return valid JSON."""


def system_prompt(name: str, description: str) -> str:
    """Fill SYSTEM_PROMPT for one program."""
    return SYSTEM_PROMPT.format(NAME=name, DESCRIPTION=description)
