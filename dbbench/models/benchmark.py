"""
Benchmark Request/Response Models

Payloads accepted and produced by the benchmark runner.
"""

from typing import Any, Dict, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class BenchmarkRequest(BaseModel):
    """One benchmark invocation: which backend, which workload, which knobs."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    database_type: str = Field(
        ...,
        validation_alias=AliasChoices("databaseType", "database_type"),
        description="Backend type tag (e.g. memory)",
    )
    operation_type: str = Field(
        ...,
        validation_alias=AliasChoices("operationType", "operation_type"),
        description="Registered operation name",
    )
    parameters: Dict[str, Any] = Field(
        default_factory=dict,
        description="Operation parameters; keys prefixed with 'db.' configure the backend",
    )


class BenchmarkResponse(BaseModel):
    """Outcome of one benchmark invocation."""

    model_config = ConfigDict(populate_by_name=True)

    operation_type: str = Field(..., serialization_alias="operationType")
    database_type: str = Field(..., serialization_alias="databaseType")
    success: bool = Field(False, description="Operation completed without total failure")
    error_message: Optional[str] = Field(None, serialization_alias="errorMessage")
    items_processed: int = Field(0, serialization_alias="itemsProcessed")
    total_duration_ns: int = Field(0, serialization_alias="totalDurationNs")
    avg_operation_duration_ns: int = Field(0, serialization_alias="avgOperationDurationNs")
    throughput: float = Field(0.0, description="Items per second")
    metrics: Optional[Dict[str, Any]] = Field(None, description="Run summary")

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True, indent=2)
