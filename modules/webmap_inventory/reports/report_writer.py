"""Inventory Report Writer

Writes the three report files of an inventory run: the YAML map report, the
YAML layer report and the CSV dependency matrix. All files of one run share
the same millisecond timestamp in their names.
"""

import logging
import time
from pathlib import Path
from typing import List, Optional, Union, Any

import pandas as pd
import yaml

from maphub.exceptions import MapHubProcessingError
from ..models import MapSummary, LayerSummary

logger = logging.getLogger(__name__)

DEPENDENCY_COLUMNS = [
    "layer_id",
    "layer_title",
    "layer_url",
    "map_item_id",
    "map_name",
    "map_views",
    "map_owner",
]


class ReportWriter:
    """Writes inventory reports into a reports directory."""
    
    def __init__(self, reports_dir: Union[str, Path] = "reports", timestamp: Optional[int] = None):
        """Initialize the writer.
        
        Args:
            reports_dir: Output directory, created if missing
            timestamp: Epoch milliseconds used in file names; defaults to now
        """
        self.reports_dir = Path(reports_dir)
        self.timestamp = timestamp if timestamp is not None else int(time.time() * 1000)
    
    @property
    def maps_report_path(self) -> Path:
        return self.reports_dir / f"maps_{self.timestamp}.yml"
    
    @property
    def layers_report_path(self) -> Path:
        return self.reports_dir / f"layers_{self.timestamp}.yml"
    
    @property
    def dependencies_path(self) -> Path:
        return self.reports_dir / f"dependencies_{self.timestamp}.csv"
    
    def write_maps_report(self, maps: List[MapSummary]) -> Path:
        """Write every web map with its operational layers as YAML."""
        return self._write_yaml(
            self.maps_report_path,
            [webmap.model_dump(by_alias=True, exclude_none=True) for webmap in maps]
        )
    
    def write_layers_report(self, layers: List[LayerSummary]) -> Path:
        """Write every layer with the maps referencing it as YAML."""
        return self._write_yaml(
            self.layers_report_path,
            [layer.model_dump(by_alias=True, exclude_none=True) for layer in layers]
        )
    
    def write_dependencies_csv(self, layers: List[LayerSummary]) -> Path:
        """Write one CSV row per (layer, referencing map) pair.
        
        Layers no map references contribute no rows; the header is always
        written.
        """
        rows = build_dependency_rows(layers)
        
        # object dtype keeps view counts as integers next to missing values
        df = pd.DataFrame(rows, columns=DEPENDENCY_COLUMNS, dtype=object)
        path = self.dependencies_path
        
        try:
            self._ensure_reports_dir()
            df.to_csv(path, index=False)
        except OSError as e:
            raise MapHubProcessingError(f"Failed to write dependency CSV: {str(e)}", {"path": str(path)})
        
        logger.info(f"Dependency matrix exported to {path} ({len(rows)} rows)")
        return path
    
    def _write_yaml(self, path: Path, data: Any) -> Path:
        try:
            self._ensure_reports_dir()
            with open(path, 'w', encoding='utf-8') as f:
                yaml.safe_dump(data, f, sort_keys=False, allow_unicode=True, default_flow_style=False)
        except OSError as e:
            raise MapHubProcessingError(f"Failed to write report: {str(e)}", {"path": str(path)})
        
        logger.info(f"Report exported to {path}")
        return path
    
    def _ensure_reports_dir(self) -> None:
        self.reports_dir.mkdir(parents=True, exist_ok=True)


def build_dependency_rows(layers: List[LayerSummary]) -> List[List[Any]]:
    """Flatten layer summaries into dependency matrix rows."""
    rows = []
    for layer in layers:
        layer_record = [layer.id, layer.title, layer.url]
        for webmap in layer.maps:
            rows.append(layer_record + [webmap.id, webmap.title, webmap.num_views, webmap.owner])
    return rows
