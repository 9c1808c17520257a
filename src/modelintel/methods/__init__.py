"""Dynamic method resolution for record classes, facades and managers."""

from modelintel.methods.extension import ForwardedMethodsExtension
from modelintel.methods.passable import Passable
from modelintel.methods.pipeline import Dispatch, Pipe, Pipeline
from modelintel.methods.pipes import (
    FacadesPipe,
    ForwardsToQueryPipe,
    MacrosPipe,
    ManagersPipe,
    MixinsPipe,
    PipeFactory,
    SelfClassPipe,
)

__all__ = [
    "Dispatch",
    "FacadesPipe",
    "ForwardedMethodsExtension",
    "ForwardsToQueryPipe",
    "MacrosPipe",
    "ManagersPipe",
    "MixinsPipe",
    "Passable",
    "Pipe",
    "PipeFactory",
    "Pipeline",
    "SelfClassPipe",
]
