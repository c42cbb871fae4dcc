"""Tests for the inventory report writer."""

import csv

import pytest
import yaml

from maphub.exceptions import MapHubProcessingError
from modules.webmap_inventory.models import LayerReference, MapReference, MapSummary, LayerSummary
from modules.webmap_inventory.reports import ReportWriter, build_dependency_rows, DEPENDENCY_COLUMNS


@pytest.fixture
def maps():
    return [
        MapSummary(
            id="map1",
            title="Wildfire Map",
            num_views=42,
            owner="gis.user",
            layers=[LayerReference(id="op1", item_id="item-a", title="Fire Perimeters")]
        ),
        MapSummary(id="map2", title="Empty Map", num_views=None, owner="other.user"),
    ]


@pytest.fixture
def layers():
    return [
        LayerSummary(
            id="item-a",
            title="Fire Perimeters",
            url="https://services.arcgis.com/x/Fire/FeatureServer",
            maps=[
                MapReference(id="map1", title="Wildfire Map", num_views=42, owner="gis.user"),
                MapReference(id="map3", title="Ops Map", num_views=None, owner="ops"),
            ]
        ),
        LayerSummary(id="item-b", title="Unreferenced", url=None, maps=[]),
    ]


class TestReportWriter:
    """Test cases for ReportWriter."""
    
    def test_file_names_share_timestamp(self, tmp_path):
        writer = ReportWriter(tmp_path, timestamp=1700000000123)
        
        assert writer.maps_report_path == tmp_path / "maps_1700000000123.yml"
        assert writer.layers_report_path == tmp_path / "layers_1700000000123.yml"
        assert writer.dependencies_path == tmp_path / "dependencies_1700000000123.csv"
    
    def test_default_timestamp_is_milliseconds(self, tmp_path):
        writer = ReportWriter(tmp_path)
        
        assert writer.timestamp > 10 ** 12
    
    def test_write_maps_report(self, tmp_path, maps):
        """Test the YAML map report contents and key order."""
        writer = ReportWriter(tmp_path / "reports", timestamp=1)
        
        path = writer.write_maps_report(maps)
        
        assert path.exists()
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
        assert data[0] == {
            "id": "map1",
            "title": "Wildfire Map",
            "numViews": 42,
            "owner": "gis.user",
            "layers": [{"id": "op1", "itemId": "item-a", "title": "Fire Perimeters"}],
        }
        assert data[1] == {"id": "map2", "title": "Empty Map", "owner": "other.user", "layers": []}
        assert path.read_text(encoding="utf-8").startswith("- id: map1\n  title: Wildfire Map\n  numViews: 42")
    
    def test_write_layers_report(self, tmp_path, layers):
        writer = ReportWriter(tmp_path, timestamp=1)
        
        data = yaml.safe_load(writer.write_layers_report(layers).read_text(encoding="utf-8"))
        
        assert data[0]["id"] == "item-a"
        assert [m["id"] for m in data[0]["maps"]] == ["map1", "map3"]
        assert data[0]["maps"][1] == {"id": "map3", "title": "Ops Map", "owner": "ops"}
        assert data[1] == {"id": "item-b", "title": "Unreferenced", "maps": []}
        assert "null" not in writer.layers_report_path.read_text(encoding="utf-8")
    
    def test_write_dependencies_csv(self, tmp_path, layers):
        """Test one row per layer and referencing map, with the fixed header."""
        writer = ReportWriter(tmp_path, timestamp=1)
        
        path = writer.write_dependencies_csv(layers)
        
        with open(path, newline="", encoding="utf-8") as f:
            rows = list(csv.reader(f))
        
        assert rows[0] == DEPENDENCY_COLUMNS
        assert rows[1] == [
            "item-a", "Fire Perimeters", "https://services.arcgis.com/x/Fire/FeatureServer",
            "map1", "Wildfire Map", "42", "gis.user"
        ]
        assert rows[2][3] == "map3"
        assert rows[2][5] == ""
        assert len(rows) == 3
    
    def test_write_dependencies_csv_header_only(self, tmp_path):
        writer = ReportWriter(tmp_path, timestamp=1)
        
        with open(writer.write_dependencies_csv([]), newline="", encoding="utf-8") as f:
            rows = list(csv.reader(f))
        
        assert rows == [DEPENDENCY_COLUMNS]
    
    def test_write_failure_raises_processing_error(self, tmp_path, maps):
        """Test that an unwritable reports directory raises."""
        blocker = tmp_path / "not_a_dir"
        blocker.write_text("file in the way")
        writer = ReportWriter(blocker, timestamp=1)
        
        with pytest.raises(MapHubProcessingError):
            writer.write_maps_report(maps)


def test_build_dependency_rows(layers):
    rows = build_dependency_rows(layers)
    
    assert len(rows) == 2
    assert rows[0][:3] == ["item-a", "Fire Perimeters", "https://services.arcgis.com/x/Fire/FeatureServer"]
    assert rows[1][3:] == ["map3", "Ops Map", None, "ops"]
