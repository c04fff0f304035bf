from enum import Enum


class HarnessPhase(Enum):
    """
    The phases a harness run goes through. Phases are strictly sequential; any fatal error moves the run to ``FAILED``.
    """
    IDLE = 0
    BUILDING = 10
    CLEANING = 20
    LAUNCHING = 30
    AWAITING_READINESS = 40
    INITIALIZING = 50
    DONE = 60
    FAILED = 99
