from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel, Field


class BuildOptions(BaseModel):
    """Parsed builder flags for a single compile request."""

    target_label: str
    output_jar: str
    source_files: list[str] = Field(default_factory=list)
    source_jars: list[str] = Field(default_factory=list)
    classpath: list[str] = Field(default_factory=list)
    direct_jars: list[str] = Field(default_factory=list)
    processor_names: list[str] = Field(default_factory=list)
    processor_path: list[str] = Field(default_factory=list)
    javacopts: list[str] = Field(default_factory=list)
    native_header_output: str | None = None
    generated_sources_output_jar: str | None = None
    output_deps_proto: str | None = None
    manifest_proto_path: str | None = None
    compress_jar: bool = False
    use_direct_deps_only: bool = False
    jdt_debug: bool = False
    max_stdouterr_bytes: int | None = None
    eclipse_preferences_file: str | None = None


class BuildResult(BaseModel):
    ok: bool
    output: str


@dataclass(frozen=True)
class StagingLayout:
    root: Path
    class_dir: Path
    native_header_dir: Path
    source_gen_dir: Path
    source_jar_dir: Path

    @property
    def command_line_file(self) -> Path:
        return self.root / "jdt.commandline"


@dataclass(frozen=True)
class CompileOutcome:
    ok: bool
    stdout: str
    stderr: str
