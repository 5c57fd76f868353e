# advisor/rules/decision.py
from advisor.types import ADVISORIES, ActionState, Decision


def decide(signals):
    """Acción del frame. Orden fijo: peligro o luz roja/amarilla > luz verde > nada."""
    if signals.stop_detected or signals.red_or_yellow_light:
        return Decision(ActionState.STOP, ADVISORIES[ActionState.STOP])
    if signals.green_light:
        return Decision(ActionState.PROCEED_SLOWLY, ADVISORIES[ActionState.PROCEED_SLOWLY])
    # Sin señales relevantes: mismo aviso que con luz verde
    return Decision(ActionState.PROCEED_SLOWLY, ADVISORIES[ActionState.PROCEED_SLOWLY])
