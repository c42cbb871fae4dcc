"""WebMapInventory Implementation

This module implements the WebMapInventory processor: it searches an
organization's web maps, resolves their operational layers, fetches layer
item details and writes the map, layer and dependency reports.
"""

import logging
from datetime import datetime
from typing import Optional, Dict, Any, List

from maphub.interfaces.module_processor import ModuleProcessor, ProcessingResult, ModuleStatus
from maphub.config.config_loader import ConfigLoader
from maphub.connection import AuthHandler, PortalClient
from maphub.exceptions import MapHubBaseException
from maphub.utils import log_performance
from ..search import WebMapSearcher
from ..layers import LayerResolver
from ..reports import ReportWriter, build_dependency_rows

logger = logging.getLogger(__name__)

MODULE_NAME = "webmap_inventory"


class WebMapInventory(ModuleProcessor):
    """Web map to layer dependency inventory implementing ModuleProcessor.
    
    A run proceeds in two passes. The map pass pages through the search API
    and reads each map's operational layers, producing the map report. The
    layer pass fetches item details for either the user's layers of interest
    or every layer seen in the map pass, and cross references them with the
    maps to produce the layer report and the dependency matrix.
    """
    
    def __init__(self, config_loader: ConfigLoader, environment: str = "development",
                 client: Optional[PortalClient] = None,
                 reports_dir: Optional[str] = None):
        """Initialize the inventory processor.
        
        Args:
            config_loader: ConfigLoader instance providing access to configuration
            environment: Environment whose configuration is used
            client: Portal client to use; created from configuration when omitted
            reports_dir: Output directory overriding ``output.reports_dir``
        """
        self.config_loader = config_loader
        self.environment = environment
        self.client = client
        self.reports_dir = reports_dir
        self.auth_handler = AuthHandler(config_loader)
        self._last_run: Optional[datetime] = None
        self._configuration_valid: Optional[bool] = None
        logger.info(f"WebMapInventory initialized for environment: {environment}")
    
    def validate_configuration(self) -> bool:
        """Validate the configuration sections the inventory depends on.
        
        Returns:
            bool: True if configuration is valid and complete, False otherwise
        """
        if self._configuration_valid is not None:
            return self._configuration_valid
        
        try:
            portal_url = self.config_loader.get_portal_url(self.environment)
            search_config = self.config_loader.get_search_config(self.environment)
            processing_config = self.config_loader.get_processing_config(self.environment)
            self.config_loader.get_token_config(self.environment)
            self.config_loader.get_output_config(self.environment)
        except MapHubBaseException as e:
            logger.error(f"Configuration validation failed: {e}")
            self._configuration_valid = False
            return False
        
        problems = []
        if not portal_url.startswith(("https://", "http://")):
            problems.append(f"portal_url must be an http(s) URL: {portal_url}")
        if int(search_config.get('page_size', 100)) <= 0:
            problems.append("search.page_size must be positive")
        if int(search_config.get('max_pages', 1000)) <= 0:
            problems.append("search.max_pages must be positive")
        if int(processing_config.get('max_workers', 8)) <= 0:
            problems.append("processing.max_workers must be positive")
        
        for problem in problems:
            logger.error(f"Invalid configuration: {problem}")
        
        self._configuration_valid = not problems
        return self._configuration_valid
    
    @log_performance
    def process(self, dry_run: bool = False,
                item_ids: Optional[str] = None,
                username: Optional[str] = None,
                password: Optional[str] = None,
                query: Optional[str] = None,
                prompt: bool = True) -> ProcessingResult:
        """Run the inventory.
        
        Args:
            dry_run: If True, collect everything but write no report files
            item_ids: Comma separated layer item ids to report on; all layers when omitted
            username: Portal username; falls back to ARCGIS_USERNAME
            password: Portal password; falls back to ARCGIS_PASSWORD or a prompt
            query: Search query overriding the configured one
            prompt: Whether a missing password may be requested interactively
            
        Returns:
            ProcessingResult: Standardized result object with success status, metrics, and errors
        """
        start_time = datetime.now()
        logger.info(f"Starting web map inventory (dry_run={dry_run})")
        
        if not self.validate_configuration():
            return ProcessingResult(
                success=False,
                records_processed=0,
                errors=["Configuration validation failed"],
                metadata={"dry_run": dry_run},
                execution_time=0.0
            )
        
        try:
            if self.client is None:
                self.client = PortalClient(self.config_loader, self.environment)
            
            self._authenticate(username, password, prompt)
            metadata = self._run_inventory(dry_run, item_ids, query)
            
        except MapHubBaseException as e:
            logger.error(f"Web map inventory failed: {e}")
            return ProcessingResult(
                success=False,
                records_processed=0,
                errors=[str(e)],
                metadata={"dry_run": dry_run},
                execution_time=(datetime.now() - start_time).total_seconds()
            )
        finally:
            self.auth_handler.clear_credentials_cache()
        
        self._last_run = datetime.now()
        return ProcessingResult(
            success=True,
            records_processed=metadata["maps"],
            errors=[],
            metadata=metadata,
            execution_time=(self._last_run - start_time).total_seconds()
        )
    
    def get_status(self) -> ModuleStatus:
        """Get current module processing status."""
        is_configured = self.validate_configuration()
        
        return ModuleStatus(
            module_name=MODULE_NAME,
            is_configured=is_configured,
            last_run=self._last_run,
            status="ready" if is_configured else "error",
            health_check=is_configured
        )
    
    def _authenticate(self, username: Optional[str], password: Optional[str], prompt: bool) -> None:
        credentials = self.auth_handler.get_credentials(username, password, prompt=prompt)
        
        if credentials:
            self.client.authenticate(*credentials)
        
        if not self.client.is_authenticated():
            logger.info("Proceeding without a token. Only publicly available webmaps will be processed.")
    
    def _run_inventory(self, dry_run: bool, item_ids: Optional[str], query: Optional[str]) -> Dict[str, Any]:
        search_config = self.config_loader.get_search_config(self.environment)
        processing_config = self.config_loader.get_processing_config(self.environment)
        reports_dir = self.reports_dir or self.config_loader.get_output_config(self.environment).get(
            'reports_dir', 'reports')
        
        resolver = LayerResolver(self.client, processing_config.get('max_workers', 8))
        
        layer_item_ids: List[str] = []
        if item_ids and item_ids.strip():
            layer_item_ids = resolver.validate_item_ids(item_ids)
        
        maps = WebMapSearcher(self.client, search_config, query=query).get_all_maps()
        resolver.populate_map_layers(maps)
        
        writer = ReportWriter(reports_dir)
        report_files: Dict[str, str] = {}
        
        if not dry_run:
            report_files['maps'] = str(writer.write_maps_report(maps))
        
        if not layer_item_ids:
            layer_item_ids = resolver.collect_layer_item_ids(maps)
        
        detailed_layers = resolver.get_detailed_layers(layer_item_ids)
        layers = resolver.build_layer_summaries(detailed_layers, maps)
        dependency_count = len(build_dependency_rows(layers))
        
        if not dry_run:
            report_files['dependencies'] = str(writer.write_dependencies_csv(layers))
            report_files['layers'] = str(writer.write_layers_report(layers))
        else:
            logger.info("Dry run - no report files written")
        
        logger.info(f"Inventory complete: {len(maps)} maps, {len(layers)} layers, "
                    f"{dependency_count} dependencies")
        
        return {
            "dry_run": dry_run,
            "maps": len(maps),
            "layers": len(layers),
            "dependencies": dependency_count,
            "report_files": report_files,
            "timestamp": writer.timestamp,
        }
