import io
from typing import Any

import yaml

from ..core.ports import FrontmatterCodec
from ..logging_config import get_logger

logger = get_logger("yaml_codec")


class YamlFrontmatter(FrontmatterCodec):
    def decode(self, content: str) -> dict[str, Any] | None:
        # Frontmatter is informational only; a broken block must not fail the scan
        try:
            fm = yaml.safe_load(io.StringIO(content))
        except yaml.YAMLError as e:
            logger.warning("Ignoring invalid frontmatter: %s", e)
            return None
        if fm is None:
            return {}
        if not isinstance(fm, dict):
            logger.warning("Ignoring frontmatter that is not a mapping: %r", type(fm).__name__)
            return None
        return fm
