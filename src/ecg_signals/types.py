"""Type definitions for ECG waveform data."""

from enum import IntEnum, auto
from typing import Annotated, TypeAlias

import numpy as np
import numpy.typing as npt

# Stored samples of one lead, one value per sample in units of the AVM
SampleArray: TypeAlias = Annotated[npt.NDArray[np.int16], "Shape: (n_samples,)"]


class LeadType(IntEnum):
    """Lead identities.

    The numeric values follow the lead vocabulary shared by the SCP-ECG based
    formats, so the order of members is significant and must not change.
    """

    Unknown = 0
    I = auto()
    II = auto()
    V1 = auto()
    V2 = auto()
    V3 = auto()
    V4 = auto()
    V5 = auto()
    V6 = auto()
    V7 = auto()
    V2R = auto()
    V3R = auto()
    V4R = auto()
    V5R = auto()
    V6R = auto()
    V7R = auto()
    X = auto()
    Y = auto()
    Z = auto()
    CC5 = auto()
    CM5 = auto()
    LA = auto()
    RA = auto()
    LL = auto()
    fI = auto()
    fE = auto()
    fC = auto()
    fA = auto()
    fM = auto()
    fF = auto()
    fH = auto()
    dI = auto()
    dII = auto()
    dV1 = auto()
    dV2 = auto()
    dV3 = auto()
    dV4 = auto()
    dV5 = auto()
    dV6 = auto()
    dV7 = auto()
    dV2R = auto()
    dV3R = auto()
    dV4R = auto()
    dV5R = auto()
    dV6R = auto()
    dV7R = auto()
    dX = auto()
    dY = auto()
    dZ = auto()
    dCC5 = auto()
    dCM5 = auto()
    dLA = auto()
    dRA = auto()
    dLL = auto()
    dfI = auto()
    dfE = auto()
    dfC = auto()
    dfA = auto()
    dfM = auto()
    dfF = auto()
    dfH = auto()
    III = auto()
    aVR = auto()
    aVL = auto()
    aVF = auto()
    aVRneg = auto()
    V8 = auto()
    V9 = auto()
    V8R = auto()
    V9R = auto()
    D = auto()
    A = auto()
    J = auto()
    Defib = auto()
    Extern = auto()
    A1 = auto()
    A2 = auto()
    A3 = auto()
    A4 = auto()
    dV8 = auto()
    dV9 = auto()
    dV8R = auto()
    dV9R = auto()
    dD = auto()
    dA = auto()
    dJ = auto()
    Chest = auto()
    V = auto()
    VR = auto()
    VL = auto()
    VF = auto()
    MCL = auto()
    MCL1 = auto()
    MCL2 = auto()
    MCL3 = auto()
    MCL4 = auto()
    MCL5 = auto()
    MCL6 = auto()
    CC = auto()
    CC1 = auto()
    CC2 = auto()
    CC3 = auto()
    CC4 = auto()
    CC6 = auto()
    CC7 = auto()
    CM = auto()
    CM1 = auto()
    CM2 = auto()
    CM3 = auto()
    CM4 = auto()
    CM6 = auto()
    dIII = auto()
    daVR = auto()
    daVL = auto()
    daVF = auto()
    daVRneg = auto()
    dChest = auto()
    dV = auto()
    dVR = auto()
    dVL = auto()
    dVF = auto()
    CM7 = auto()
    CH5 = auto()
    CS5 = auto()
    CB5 = auto()
    CR5 = auto()
    ML = auto()
    AB1 = auto()
    AB2 = auto()
    AB3 = auto()
    AB4 = auto()
    ES = auto()
    AS = auto()
    AI = auto()
    S = auto()
    dDefib = auto()
    dExtern = auto()
    dA1 = auto()
    dA2 = auto()
    dA3 = auto()
    dA4 = auto()
    dMCL1 = auto()
    dMCL2 = auto()
    dMCL3 = auto()
    dMCL4 = auto()
    dMCL5 = auto()
    dMCL6 = auto()
    RL = auto()
    CV5RL = auto()
    CV6LL = auto()
    CV6LU = auto()
    V10 = auto()
    dMCL = auto()
    dCC = auto()
    dCC1 = auto()
    dCC2 = auto()
    dCC3 = auto()
    dCC4 = auto()
    dCC6 = auto()
    dCC7 = auto()
    dCM = auto()
    dCM1 = auto()
    dCM2 = auto()
    dCM3 = auto()
    dCM4 = auto()
    dCM6 = auto()
    dCM7 = auto()
    dCH5 = auto()
    dCS5 = auto()
    dCB5 = auto()
    dCR5 = auto()
    dML = auto()
    dAB1 = auto()
    dAB2 = auto()
    dAB3 = auto()
    dAB4 = auto()
    dES = auto()
    dAS = auto()
    dAI = auto()
    dS = auto()
    dRL = auto()
    dCV5RL = auto()
    dCV6LL = auto()
    dCV6LU = auto()
    dV10 = auto()

    @classmethod
    def from_name(cls, name: str) -> "LeadType":
        """Resolve a lead name such as ``"aVR"`` or ``"V4R"``.

        Returns:
            The matching lead type, or ``LeadType.Unknown`` for unknown names.
        """
        try:
            return cls[name]
        except KeyError:
            return cls.Unknown
