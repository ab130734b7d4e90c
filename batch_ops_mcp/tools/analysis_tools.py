"""Code analysis and transform MCP tools.

These tools share the batch engine's concurrency limiter. Analysis is a
lightweight line-based heuristic; the transform tool only reports what would
be transformed and leaves files untouched.
"""

import asyncio
import datetime
import json
from typing import Any

import aiofiles
from pydantic import ValidationError as PydanticValidationError

from ..batch import ConcurrencyLimiter
from ..config import get_settings
from ..logger_config import log_mcp_call
from ..models import AnalysisOptions
from ..models import AnalysisType
from ..models import Transformation
from .batch_tools import format_error

COMPLEXITY_MARKERS = ("if", "for", "while", "switch", "catch")


def measure_complexity(lines: list[str]) -> dict[str, int]:
    """Count decision markers per line, starting from a base complexity of 1."""
    complexity = 1
    for line in lines:
        for marker in COMPLEXITY_MARKERS:
            if marker in line:
                complexity += 1
    return {"complexity": complexity, "lines": len(lines)}


def extract_dependencies(lines: list[str]) -> dict[str, Any]:
    """Collect import and require lines."""
    imports = [line.strip() for line in lines if "import" in line or "require" in line]
    return {"imports": imports, "count": len(imports)}


async def analyze_file(file: str, analysis: str) -> dict[str, Any]:
    """Run one analysis on one file; read errors are reported, not raised."""
    try:
        async with aiofiles.open(file, "r", encoding="utf-8") as f:
            content = await f.read()
    except (OSError, UnicodeDecodeError) as e:
        return {"error": True, "message": str(e)}

    lines = content.split("\n")
    if analysis == AnalysisType.COMPLEXITY.value:
        return measure_complexity(lines)
    if analysis == AnalysisType.DEPENDENCIES.value:
        return extract_dependencies(lines)
    return {"placeholder": True, "message": f"Analysis type {analysis} not yet implemented"}


async def run_code_analysis(
    files: list[str], analyses: list[str], options: AnalysisOptions
) -> list[dict[str, Any]]:
    """Analyze every (file, analysis) pair through a shared limiter."""
    limiter = ConcurrencyLimiter(options.max_concurrent)

    async def analyze(file: str, analysis: str) -> dict[str, Any]:
        return {"file": file, "analysis": analysis, "result": await analyze_file(file, analysis)}

    return list(
        await asyncio.gather(
            *(limiter.run(analyze, file, analysis) for file in files for analysis in analyses)
        )
    )


def register_analysis_tools(mcp_server):
    """Register the code analysis and transform tools with the MCP server."""

    @mcp_server.tool()
    @log_mcp_call
    async def batch_code_analysis(
        files: list[str],
        analyses: list[str],
        options: dict[str, Any] | None = None,
    ) -> str:
        """Analyze multiple code files in parallel.

        Parameters:
            files (List[str]): Paths of files to analyze
            analyses (List[str]): Any of complexity, dependencies, test-coverage, linting
            options (Dict, optional): maxConcurrent (default 5), includeMetrics

        Returns:
            str: JSON object ``{"analyses": [{file, analysis, result}, ...]}``
        """
        try:
            raw = dict(options or {})
            raw.setdefault("maxConcurrent", get_settings().analysis_max_concurrent)
            parsed = AnalysisOptions.model_validate(raw)
            for analysis in analyses:
                AnalysisType(analysis)
        except (PydanticValidationError, ValueError) as e:
            return format_error(e)

        results = await run_code_analysis(files, analyses, parsed)
        return json.dumps({"analyses": results}, indent=2)

    @mcp_server.tool()
    @log_mcp_call
    async def batch_transform(
        files: list[str],
        transformation: dict[str, Any],
        output_dir: str | None = None,
    ) -> str:
        """Apply transformations to multiple files.

        Parameters:
            files (List[str]): Paths of files to transform
            transformation (Dict): ``type`` is one of format, minify, transpile, compress;
                ``options`` is passed through
            output_dir (str, optional): Directory for transformed output

        Returns:
            str: JSON receipt with the number of files, type, output directory and timestamp
        """
        try:
            parsed = Transformation.model_validate(transformation)
        except PydanticValidationError as e:
            return format_error(e)

        receipt = {
            "transformed": len(files),
            "type": parsed.type.value,
            "outputDir": output_dir,
            "timestamp": datetime.datetime.now(datetime.timezone.utc).isoformat(),
        }
        return json.dumps(receipt, indent=2)

    return batch_code_analysis, batch_transform
