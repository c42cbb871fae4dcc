"""Tests for the web map inventory command-line interface."""

import json
import os

import pytest
from unittest.mock import patch, Mock, ANY

from maphub.interfaces import ProcessingResult
from modules.webmap_inventory.main import main, build_parser

CONFIG = {
    "shared": {
        "search": {"org_id": "org1", "page_size": 100, "max_pages": 10, "item_types": ["Web Map"]},
        "token": {"expiration_minutes": 360, "timeout_seconds": 30},
    },
    "environments": {
        "development": {
            "portal_url": "https://example.maps.arcgis.com",
            "logging": {"level": "INFO", "format": "standard"},
            "processing": {"max_workers": 2, "request_timeout_seconds": 10},
            "output": {"reports_dir": "reports"},
        }
    },
}


@pytest.fixture
def config_dir(tmp_path):
    with open(tmp_path / "environment_config.json", "w") as f:
        json.dump(CONFIG, f)
    return tmp_path


def _result(success=True, errors=None):
    return ProcessingResult(
        success=success,
        records_processed=2 if success else 0,
        errors=errors or [],
        metadata={"maps": 2, "layers": 1, "dependencies": 2, "report_files": {}, "dry_run": True},
        execution_time=0.1
    )


class TestMain:
    """Test cases for the CLI entry point."""
    
    def test_parser_defaults(self):
        args = build_parser().parse_args([])
        
        assert args.environment == "development"
        assert args.dry_run is False
        assert args.no_prompt is False
        assert args.item_ids is None
    
    @patch.dict(os.environ, {}, clear=True)
    @patch('modules.webmap_inventory.main.PortalClient')
    @patch('modules.webmap_inventory.main.WebMapInventory')
    def test_success_exit_code(self, mock_inventory_class, mock_client_class, config_dir, capsys):
        """Test that a successful run exits 0 and prints a summary."""
        mock_inventory = Mock()
        mock_inventory.process.return_value = _result()
        mock_inventory_class.return_value = mock_inventory
        
        exit_code = main([
            "--config-dir", str(config_dir),
            "--dry-run",
            "--no-prompt",
            "--item-ids", "item-a,item-b",
            "--username", "gis.user",
        ])
        
        assert exit_code == 0
        mock_inventory.process.assert_called_once_with(
            dry_run=True,
            item_ids="item-a,item-b",
            username="gis.user",
            query=None,
            prompt=False
        )
        mock_client = mock_client_class.return_value
        mock_client_class.assert_called_once_with(ANY, "development")
        assert mock_inventory_class.call_args.kwargs["client"] is mock_client
        mock_client.__exit__.assert_called_once()
        assert "WEB MAP INVENTORY SUMMARY" in capsys.readouterr().out
    
    @patch.dict(os.environ, {"ARCGIS_ITEM_IDS": "item-z"}, clear=True)
    @patch('modules.webmap_inventory.main.WebMapInventory')
    def test_item_ids_from_environment(self, mock_inventory_class, config_dir):
        mock_inventory = Mock()
        mock_inventory.process.return_value = _result()
        mock_inventory_class.return_value = mock_inventory
        
        main(["--config-dir", str(config_dir)])
        
        assert mock_inventory.process.call_args.kwargs["item_ids"] == "item-z"
    
    @patch.dict(os.environ, {}, clear=True)
    @patch('modules.webmap_inventory.main.WebMapInventory')
    def test_failure_exit_code(self, mock_inventory_class, config_dir, capsys):
        """Test that a failed run exits 1 and reports the errors."""
        mock_inventory = Mock()
        mock_inventory.process.return_value = _result(success=False, errors=["Too many pages!"])
        mock_inventory_class.return_value = mock_inventory
        
        exit_code = main(["--config-dir", str(config_dir)])
        
        assert exit_code == 1
        assert "Too many pages!" in capsys.readouterr().err
    
    def test_missing_configuration_exit_code(self, tmp_path, capsys):
        exit_code = main(["--config-dir", str(tmp_path)])
        
        assert exit_code == 1
        assert "Configuration error" in capsys.readouterr().err
    
    @patch.dict(os.environ, {}, clear=True)
    @patch('modules.webmap_inventory.main.WebMapInventory')
    def test_client_closed_when_processing_raises(self, mock_inventory_class, config_dir):
        """Test that the portal session is closed even if the run blows up."""
        mock_inventory_class.return_value.process.side_effect = RuntimeError("boom")
        
        with patch('modules.webmap_inventory.main.PortalClient') as mock_client_class:
            with pytest.raises(RuntimeError):
                main(["--config-dir", str(config_dir)])
        
        mock_client_class.return_value.__exit__.assert_called_once()
    
    @patch.dict(os.environ, {}, clear=True)
    def test_missing_required_environment_variable(self, tmp_path, capsys):
        config = dict(CONFIG, validation={"required_environment_variables": ["ARCGIS_USERNAME"]})
        with open(tmp_path / "environment_config.json", "w") as f:
            json.dump(config, f)
        
        exit_code = main(["--config-dir", str(tmp_path)])
        
        assert exit_code == 1
        assert "ARCGIS_USERNAME" in capsys.readouterr().err
