"""Configuration models describing tidyname settings."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from tidyname.history.pruner import PruneConfig
from tidyname.rename.sanitize import SanitizeOptions
from tidyname.rules.models import FilenamePatternRule, MetadataPatternRule, RulePriorityMode
from tidyname.templates.models import FolderStructure, Template


class TidyBaseModel(BaseModel):
    """Shared configuration for tidyname configuration models."""

    model_config = ConfigDict(extra="forbid")


def default_templates() -> List[Template]:
    return [
        Template(
            id="date-prefix",
            name="Date Prefix",
            pattern="{date}-{original}",
            is_default=True,
            description="Prefix the original name with the capture or creation date.",
        ),
        Template(
            id="year-month-folders",
            name="Year/Month Folders",
            pattern="{year}/{month}/{original}",
            description="Nest files under year and month directories.",
        ),
        Template(
            id="camera-date",
            name="Camera + Date",
            pattern="{camera}-{date}-{original}",
            file_types=["jpg", "jpeg", "heic", "png", "tiff"],
        ),
        Template(
            id="document-date",
            name="Document Date",
            pattern="{date}-{original}",
            file_types=["pdf", "docx", "xlsx", "pptx"],
        ),
    ]


class Preferences(TidyBaseModel):
    """Preview and execution preferences.

    Attributes:
        rule_priority_mode: Ordering between metadata and filename rules.
        check_filesystem: Mark proposals whose target already exists on disk.
        case_sensitive_filesystem: Filesystem case sensitivity; None uses the platform default.
        sanitize_filenames: Clean template output so it is filename-safe.
        os_sanitize: OS-level sanitization options, or None to disable that stage.
        date_from_filesystem: Allow modification times to fill date placeholders.
        fallbacks: Values used for placeholders that resolve to nothing.
        recursive_scan: Scan subdirectories by default.
        include_hidden: Include hidden files when scanning.
        confirm_before_apply: Ask for confirmation before renaming.
        create_directories: Create missing destination directories for moves.
    """

    rule_priority_mode: RulePriorityMode = "combined"
    check_filesystem: bool = True
    case_sensitive_filesystem: Optional[bool] = None
    sanitize_filenames: bool = True
    os_sanitize: Optional[SanitizeOptions] = Field(default_factory=SanitizeOptions)
    date_from_filesystem: bool = False
    fallbacks: Dict[str, str] = Field(default_factory=dict)
    recursive_scan: bool = False
    include_hidden: bool = False
    confirm_before_apply: bool = True
    create_directories: bool = True


class LLMSettings(TidyBaseModel):
    """AI naming suggestion settings.

    Attributes:
        enabled: Whether suggestions are considered.
        confidence_threshold: Minimum confidence for a suggestion to replace the template name.
        results_path: JSON file holding precomputed analysis results.
    """

    enabled: bool = False
    confidence_threshold: float = Field(default=0.7, ge=0.0, le=1.0)
    results_path: Optional[str] = None


class HistorySettings(TidyBaseModel):
    """Operation history settings."""

    path: str = "~/.tidyname/history.json"
    max_entries: int = Field(default=100, ge=0)
    max_age_days: int = Field(default=30, ge=0)
    auto_prune: bool = True

    def resolved_path(self) -> Path:
        return Path(self.path).expanduser()

    def prune_config(self) -> Optional[PruneConfig]:
        """Return retention limits, or None when pruning is disabled."""
        if not self.auto_prune:
            return None
        return PruneConfig(max_entries=self.max_entries, max_age_days=self.max_age_days)


class LoggingSettings(TidyBaseModel):
    """Runtime logging configuration.

    Attributes:
        level: Logging verbosity level.
    """

    level: str = "WARNING"


class CLIOptions(TidyBaseModel):
    """CLI behavior defaults and presentation preferences.

    Attributes:
        quiet_default: Whether commands suppress non-error output by default.
        summary_default: Whether commands only print summary lines by default.
        history_limit: Default number of history entries to display.
    """

    quiet_default: bool = False
    summary_default: bool = False
    history_limit: int = Field(default=10, ge=0)


class TidyConfig(TidyBaseModel):
    """Top-level configuration struct for tidyname.

    Attributes:
        templates: Available naming templates.
        default_template_id: Template used when no rule matches.
        rules: Metadata pattern rules.
        filename_rules: Filename pattern rules.
        folder_structures: Folder structures referenced by rules.
        preferences: Preview and execution preferences.
        llm: AI suggestion settings.
        history: Operation history settings.
        logging: Logging configuration.
        cli: CLI presentation defaults.
    """

    templates: List[Template] = Field(default_factory=default_templates)
    default_template_id: str = "date-prefix"
    rules: List[MetadataPatternRule] = Field(default_factory=list)
    filename_rules: List[FilenamePatternRule] = Field(default_factory=list)
    folder_structures: List[FolderStructure] = Field(default_factory=list)
    preferences: Preferences = Field(default_factory=Preferences)
    llm: LLMSettings = Field(default_factory=LLMSettings)
    history: HistorySettings = Field(default_factory=HistorySettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    cli: CLIOptions = Field(default_factory=CLIOptions)

    @model_validator(mode="after")
    def _check_template_ids(self) -> TidyConfig:
        ids = [template.id for template in self.templates]
        duplicates = sorted({template_id for template_id in ids if ids.count(template_id) > 1})
        if duplicates:
            raise ValueError(f"Duplicate template ids: {', '.join(duplicates)}")
        return self


__all__ = [
    "CLIOptions",
    "HistorySettings",
    "LLMSettings",
    "LoggingSettings",
    "Preferences",
    "TidyBaseModel",
    "TidyConfig",
    "default_templates",
]
