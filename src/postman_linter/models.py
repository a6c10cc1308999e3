"""Lint issues, fix directives and results."""

from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field, field_serializer, field_validator, model_validator

from postman_linter.parser.base import Collection
from postman_linter.paths import NodePath


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class RuleCategory(str, Enum):
    TESTING = "testing"
    STRUCTURE = "structure"
    PERFORMANCE = "performance"
    BEST_PRACTICES = "best-practices"
    DOCUMENTATION = "documentation"
    SECURITY = "security"


class RenameRequestFix(BaseModel):
    type: Literal["rename_request"] = "rename_request"
    suggested_name: str


class AddTestFix(BaseModel):
    type: Literal["add_test"] = "add_test"
    test_code: str

    @model_validator(mode="before")
    @classmethod
    def _legacy_code_field(cls, data: Any) -> Any:
        if isinstance(data, dict) and "test_code" not in data and "suggested_code" in data:
            data = {**data, "test_code": data["suggested_code"]}
        return data


class UpdateTestDescriptionFix(BaseModel):
    type: Literal["update_test_description"] = "update_test_description"
    old_description: str
    new_description: str


class UpdateThresholdFix(BaseModel):
    type: Literal["update_threshold"] = "update_threshold"
    current_threshold: int | None = None
    suggested_threshold: int

    @model_validator(mode="before")
    @classmethod
    def _legacy_threshold_field(cls, data: Any) -> Any:
        if isinstance(data, dict) and "suggested_threshold" not in data and "new_threshold" in data:
            data = {**data, "suggested_threshold": data["new_threshold"]}
        return data


class UseEnvironmentVariableFix(BaseModel):
    type: Literal["use_environment_variable"] = "use_environment_variable"
    field: str
    suggested_variable: str


class AddSchemaValidationFix(BaseModel):
    type: Literal["add_schema_validation"] = "add_schema_validation"
    suggested_code: str


Fix = Annotated[
    Union[
        RenameRequestFix,
        AddTestFix,
        UpdateTestDescriptionFix,
        UpdateThresholdFix,
        UseEnvironmentVariableFix,
        AddSchemaValidationFix,
    ],
    Field(discriminator="type"),
]

# Fix type names written by earlier versions of the linter.
LEGACY_FIX_TYPES = {
    "add_response_time_test": "add_test",
    "fix_test_description_uri": "update_test_description",
    "adjust_threshold": "update_threshold",
}


class LintIssue(BaseModel):
    """A single defect found in a collection."""

    rule_id: str
    severity: Severity
    message: str
    path: NodePath
    line: int | None = None
    fix: Fix | None = None

    @field_validator("path", mode="before")
    @classmethod
    def _parse_path(cls, value: Any) -> Any:
        if isinstance(value, str):
            parsed = NodePath.parse(value)
            if parsed is None:
                raise ValueError(f"malformed path: {value!r}")
            return parsed
        return value

    @field_validator("fix", mode="before")
    @classmethod
    def _legacy_fix_type(cls, value: Any) -> Any:
        if isinstance(value, dict) and value.get("type") in LEGACY_FIX_TYPES:
            value = {**value, "type": LEGACY_FIX_TYPES[value["type"]]}
        return value

    @field_serializer("path")
    def _serialize_path(self, path: NodePath) -> str:
        return str(path)


class LintStats(BaseModel):
    total_requests: int = 0
    total_tests: int = 0
    total_folders: int = 0
    errors: int = 0
    warnings: int = 0
    infos: int = 0


class LintResult(BaseModel):
    score: int
    issues: list[LintIssue]
    stats: LintStats


class ResultSummary(BaseModel):
    score: int
    issues: int


class LintAndFixResult(BaseModel):
    """Outcome of linting, fixing and linting the fixed collection again."""

    fixed_collection: Collection
    fixes_applied: int
    before: ResultSummary
    after: ResultSummary
    remaining_issues: list[LintIssue]

    @field_serializer("fixed_collection")
    def _serialize_collection(self, collection: Collection) -> dict:
        return collection.to_dict()
