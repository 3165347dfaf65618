"""Records, stage payloads and value types for the PMF decision core."""

from pmfcore.models.cpa import (
    UNDEFINED_CPA,
    Cpa,
    DefinedCpa,
    UndefinedCpa,
    cpa_at_most,
    cpa_from,
    cpa_value_or,
    format_cpa,
)
from pmfcore.models.records import (
    Classification,
    ConsistencyInput,
    DecisionAction,
    DecisionRecord,
    ExperimentCriteria,
    ExperimentRecord,
    FlowRecord,
    KillCondition,
    PrimaryMetric,
    SignalRecord,
    flows_by_number,
    is_permanent_noise,
    normalize_metric_name,
    parse_classification,
    parse_decision,
)
from pmfcore.models.stages import (
    HonestyVerdict,
    PainConfidence,
    PriceTier,
    SolutionVerdict,
    Stage1Data,
    Stage2Data,
    Stage3Data,
    Stage4Data,
    Stage5Data,
    Stage6Data,
    Stage7Data,
    Stage8Data,
    Stage9Data,
    Stage10Data,
    StageData,
)

__all__ = [
    "UNDEFINED_CPA",
    "Classification",
    "ConsistencyInput",
    "Cpa",
    "DecisionAction",
    "DecisionRecord",
    "DefinedCpa",
    "ExperimentCriteria",
    "ExperimentRecord",
    "FlowRecord",
    "HonestyVerdict",
    "KillCondition",
    "PainConfidence",
    "PriceTier",
    "PrimaryMetric",
    "SignalRecord",
    "SolutionVerdict",
    "Stage1Data",
    "Stage2Data",
    "Stage3Data",
    "Stage4Data",
    "Stage5Data",
    "Stage6Data",
    "Stage7Data",
    "Stage8Data",
    "Stage9Data",
    "Stage10Data",
    "StageData",
    "UndefinedCpa",
    "cpa_at_most",
    "cpa_from",
    "cpa_value_or",
    "flows_by_number",
    "format_cpa",
    "is_permanent_noise",
    "normalize_metric_name",
    "parse_classification",
    "parse_decision",
]
