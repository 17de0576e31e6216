from pydantic import BaseModel, Field

UPDATE_RULE_PATTERN = "^(simplified|classical)$"


class BusRecord(BaseModel):
    bus_id: int = Field(gt=0)
    bus_type: str  # Slack, PV or PQ
    p_pu: float = 0.0
    q_pu: float = 0.0
    v_pu: float = 1.0
    theta_deg: float = 0.0


class LineRecord(BaseModel):
    from_bus: int = Field(gt=0)  # 1-based bus position
    to_bus: int = Field(gt=0)
    r_pu: float
    x_pu: float
    b_pu: float = 0.0


class SolverOptions(BaseModel):
    max_iterations: int | None = Field(default=None, ge=1, le=10_000)
    tolerance: float | None = Field(default=None, gt=0)
    update_rule: str | None = Field(default=None, pattern=UPDATE_RULE_PATTERN)


class GaussSeidelRequest(SolverOptions):
    buses: list[BusRecord] = Field(min_length=1)
    lines: list[LineRecord] = []


class GaussSeidelTextRequest(SolverOptions):
    bus_data: str
    line_data: str = ""


class ComplexValue(BaseModel):
    real: float
    imag: float


class TraceEntry(BaseModel):
    iteration: int
    bus_id: int
    skipped: bool
    v_old: str  # polar string
    v_new: str
    error: str  # scientific notation


class BusVoltage(BaseModel):
    bus_id: int
    bus_type: str
    magnitude_pu: float
    angle_deg: float


class BusMismatchRow(BaseModel):
    bus_id: int
    delta_p_pu: float
    delta_q_pu: float


class GaussSeidelResponse(BaseModel):
    state: str  # "converged" or "not_converged"
    converged: bool
    iterations: int
    max_error: float
    update_rule: str
    y_bus: list[list[ComplexValue]]
    trace: list[TraceEntry]
    voltages: list[BusVoltage]
    mismatches: list[BusMismatchRow]
    report: str
