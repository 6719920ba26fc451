"""User-facing denial messages.

Catalan is the default locale of the deployed tool; English is provided
for other deployments. Unknown locales fall back to Catalan.
"""

from enum import Enum

DEFAULT_LOCALE = "ca"


class MessageKey(str, Enum):
    LOCKED_OUT = "locked_out"
    LOCKOUT_TRIGGERED = "lockout_triggered"
    RATE_LIMITED = "rate_limited"


MESSAGES: dict[str, dict[MessageKey, str]] = {
    "ca": {
        MessageKey.LOCKED_OUT: (
            "ACCÉS BLOCAT\n\n"
            "El teu accés ha estat temporalment blocat degut a:\n{reason}\n\n"
            "Temps restant: {seconds} segons\n\n"
            "Si creus que això és un error, contacta amb l'administrador."
        ),
        MessageKey.LOCKOUT_TRIGGERED: (
            "MASSA INTENTS\n\n"
            "Has superat el límit d'intents permesos.\n"
            "El teu accés ha estat blocat durant {minutes} minuts.\n\n"
            "Si necessites ajuda, contacta amb l'administrador."
        ),
        MessageKey.RATE_LIMITED: (
            "LÍMIT DE VELOCITAT\n\n"
            "Has repetit aquesta acció massa vegades.\n"
            "Espera {seconds} segons abans de tornar-ho a intentar.\n\n"
            "Límit: {limit} vegades cada {window_seconds} segons"
        ),
    },
    "en": {
        MessageKey.LOCKED_OUT: (
            "ACCESS BLOCKED\n\n"
            "Your access has been temporarily blocked because of:\n{reason}\n\n"
            "Time remaining: {seconds} seconds\n\n"
            "If you think this is a mistake, contact the administrator."
        ),
        MessageKey.LOCKOUT_TRIGGERED: (
            "TOO MANY ATTEMPTS\n\n"
            "You have exceeded the allowed number of attempts.\n"
            "Your access has been blocked for {minutes} minutes.\n\n"
            "If you need help, contact the administrator."
        ),
        MessageKey.RATE_LIMITED: (
            "RATE LIMIT\n\n"
            "You have repeated this action too many times.\n"
            "Wait {seconds} seconds before trying again.\n\n"
            "Limit: {limit} times every {window_seconds} seconds"
        ),
    },
}


def render_message(key: MessageKey, locale: str = DEFAULT_LOCALE, **params: object) -> str:
    """Format the message ``key`` in ``locale``.

    Examples:
        >>> render_message(MessageKey.LOCKOUT_TRIGGERED, "en", minutes=5).splitlines()[0]
        'TOO MANY ATTEMPTS'
    """
    catalog = MESSAGES.get(locale, MESSAGES[DEFAULT_LOCALE])
    return catalog[key].format(**params)
