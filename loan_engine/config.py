"""Configuration management for loan-engine."""

import os
from dataclasses import dataclass, field
from pathlib import Path

from loan_engine.exceptions import ConfigurationError
from loan_engine.models.enums import FeePolicy


@dataclass
class ScheduleConfig:
    """Weekly schedule building options."""

    fee_policy: FeePolicy = FeePolicy.FIRST_INSTALLMENT
    settle_final_installment: bool = True


@dataclass
class ReportConfig:
    """Disbursement master roll layout."""

    title: str = "Loan Disbursement Master Roll"
    subtitle: str = "All Loan"
    sheet_name: str = "Sheet1"
    split_weeks_at_month_end: bool = False
    symbolic_totals: bool = True  # Write totals as live SUM formulas


@dataclass
class OutputConfig:
    """Output configuration."""

    output_dir: Path = field(default_factory=lambda: Path("output"))
    pretty_json: bool = False


@dataclass
class EngineConfig:
    """Main configuration for loan-engine."""

    schedule: ScheduleConfig = field(default_factory=ScheduleConfig)
    report: ReportConfig = field(default_factory=ReportConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    log_level: str = "INFO"
    log_format: str = "standard"

    @classmethod
    def from_env(cls) -> "EngineConfig":
        """Create config from ``LOAN_ENGINE_*`` environment variables."""
        fee_policy_name = os.getenv("LOAN_ENGINE_FEE_POLICY", FeePolicy.FIRST_INSTALLMENT.value)
        try:
            fee_policy = FeePolicy(fee_policy_name.upper())
        except ValueError:
            raise ConfigurationError(f"Unknown fee policy: {fee_policy_name!r}") from None

        schedule = ScheduleConfig(
            fee_policy=fee_policy,
            settle_final_installment=_env_bool("LOAN_ENGINE_SETTLE_FINAL_INSTALLMENT", True),
        )

        report = ReportConfig(
            split_weeks_at_month_end=_env_bool("LOAN_ENGINE_SPLIT_WEEKS_AT_MONTH_END", False),
            symbolic_totals=_env_bool("LOAN_ENGINE_SYMBOLIC_TOTALS", True),
        )

        output = OutputConfig(
            output_dir=Path(os.getenv("LOAN_ENGINE_OUTPUT_DIR", "output")),
            pretty_json=_env_bool("LOAN_ENGINE_PRETTY_JSON", False),
        )

        return cls(
            schedule=schedule,
            report=report,
            output=output,
            log_level=os.getenv("LOAN_ENGINE_LOG_LEVEL", "INFO"),
            log_format=os.getenv("LOAN_ENGINE_LOG_FORMAT", "standard"),
        )


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in ("1", "true", "yes", "on"):
        return True
    if value in ("0", "false", "no", "off"):
        return False
    raise ConfigurationError(f"{name} must be a boolean, got {raw!r}")

