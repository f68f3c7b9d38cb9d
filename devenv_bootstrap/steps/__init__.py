from .step_10_check_prerequisites import CheckPrerequisitesStep
from .step_20_select_profile import SelectProfileStep
from .step_30_identity import IdentityStep
from .step_40_dotfiles import DotfilesStep
from .step_50_auto_activation import AutoActivationStep
from .step_90_summary import SummaryStep

__all__ = [
    "CheckPrerequisitesStep",
    "SelectProfileStep",
    "IdentityStep",
    "DotfilesStep",
    "AutoActivationStep",
    "SummaryStep",
]
