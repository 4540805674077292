import json
import os
from abc import ABC, abstractmethod
from typing import Optional

from pydantic import ValidationError

from declgen.logger import logger
from declgen.models import Analysis


class AbstractAnalyzer(ABC):
    """
    Source of analyzed compilation units. Discovery is the only step of a
    generation run that may suspend or fail fatally.
    """

    @abstractmethod
    async def analyze(self, root_dir: str) -> Analysis:
        """
        Analyze the package rooted at *root_dir* and return every
        compilation unit with its features.
        """
        ...


class JsonAnalyzer(AbstractAnalyzer):
    """
    Loads an analysis previously dumped to JSON by the upstream analyzer.
    """

    def __init__(self, analysis_file: Optional[str] = None) -> None:
        self.analysis_file = analysis_file

    def _resolve_path(self, root_dir: str) -> str:
        if self.analysis_file:
            return self.analysis_file
        return os.path.join(root_dir, "analysis.json")

    async def analyze(self, root_dir: str) -> Analysis:
        if not os.path.isdir(root_dir):
            raise ValueError(f"Root directory does not exist: {root_dir}")

        path = self._resolve_path(root_dir)
        if not os.path.isfile(path):
            raise FileNotFoundError(f"Analysis file not found: {path}")

        with open(path, "r", encoding="utf-8") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ValueError(f"Invalid analysis JSON in {path}: {e}") from e

        try:
            analysis = Analysis.model_validate(data)
        except ValidationError as e:
            raise ValueError(f"Invalid analysis in {path}: {e}") from e

        logger.debug(
            "Analysis loaded", path=path, documents=len(analysis.documents)
        )
        return analysis
