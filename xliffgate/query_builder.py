from typing import Iterable, Optional


def build_translate_query_string(untranslated: Optional[Iterable[str]] = None, new_state: Optional[str] = None) -> str:
    """
    Builds the query string for a translate request.

    Args:
        untranslated: States the service should treat as untranslated.
        new_state: State the service sets on units it translated.

    Returns:
        "?untranslated=a,b&newState=x", or "" when there is nothing to send.
    """
    params = []

    if untranslated:
        states = sorted(set(untranslated))
        if states:
            params.append(f"untranslated={','.join(states)}")

    if new_state:
        params.append(f"newState={new_state}")

    if not params:
        return ""
    return "?" + "&".join(params)
