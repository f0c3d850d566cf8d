"""
Plugins loader: discovers local plugins under plugins/* directories with a manifest.
- Each plugin folder should provide a manifest.py with a PLUGIN_MANIFEST dict:
  {"pluginId": str, "packageName": str, "version": str, "tier": "A" | "B" | "design-owner",
   "requestedCapabilities": [...], "hooks": [...], "module": "plugins.pkg.plugin"}
"""

from __future__ import annotations

import importlib
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from types import ModuleType
from typing import Optional

from pydantic import ValidationError

from ..core.config import get_settings_instance
from .manifest import PluginManifest

logger = logging.getLogger(__name__)


@dataclass
class PluginRecord:
    manifest: PluginManifest
    plugin_dir: Optional[Path] = None

    @property
    def plugin_id(self) -> str:
        return self.manifest.plugin_id


class PluginLoader:
    def __init__(self, *, plugins_dir: Optional[Path] = None):
        # Layout is <repo>/backend/src/navgate/plugins/loader.py
        loader_path = Path(__file__).resolve()
        src_dir = loader_path.parents[2]
        candidate_parent = src_dir.parent
        repo_root = candidate_parent.parent if candidate_parent.name == "backend" else candidate_parent
        if plugins_dir is None:
            configured = Path(get_settings_instance().plugins_root)
            if not configured.is_absolute():
                configured = (repo_root / configured).resolve()
            plugins_dir = configured
        self.plugins_dir = Path(plugins_dir)
        # Plugin modules are imported as plugins.<name>.*, relative to the folder holding plugins/
        import_root = str(self.plugins_dir.parent)
        if import_root not in sys.path:
            sys.path.insert(0, import_root)
        self._modules: dict[str, ModuleType] = {}
        logger.info("Plugins loader using plugins_dir=%s", self.plugins_dir)

    def discover(self) -> dict[str, PluginRecord]:
        """Parse every plugins/<name>/manifest.py; malformed manifests are logged and skipped."""
        records: dict[str, PluginRecord] = {}
        if not self.plugins_dir.exists():
            logger.warning("Plugins directory %s does not exist", self.plugins_dir)
            return records

        # Pick up plugin folders added since the last scan
        importlib.invalidate_caches()
        package = self.plugins_dir.name
        for child in sorted(self.plugins_dir.iterdir()):
            if not child.is_dir() or not (child / "manifest.py").exists():
                continue
            try:
                module = importlib.import_module(f"{package}.{child.name}.manifest")
            except Exception as e:  # noqa: BLE001
                logger.exception("Failed importing manifest for %s: %s", child.name, e)
                continue

            raw = getattr(module, "PLUGIN_MANIFEST", None)
            if not raw:
                logger.warning("Plugin folder %s has no PLUGIN_MANIFEST; skipping", child.name)
                continue
            try:
                manifest = PluginManifest.model_validate(raw)
            except ValidationError as e:
                logger.error("Invalid manifest for %s: %s", child.name, e)
                continue

            if manifest.plugin_id in records:
                logger.warning(
                    "Duplicate pluginId %s in %s; keeping %s",
                    manifest.plugin_id,
                    child,
                    records[manifest.plugin_id].plugin_dir,
                )
                continue
            records[manifest.plugin_id] = PluginRecord(manifest=manifest, plugin_dir=child)
        return records

    def manifests(self) -> list[PluginManifest]:
        return [record.manifest for record in self.discover().values()]

    def load(self, manifest: PluginManifest) -> ModuleType:
        """Import the runtime module named by ``manifest.module``; imports are cached per plugin."""
        if manifest.plugin_id in self._modules:
            return self._modules[manifest.plugin_id]
        if not manifest.module:
            raise ImportError(f"Plugin '{manifest.plugin_id}' does not declare a module")
        module = importlib.import_module(manifest.module)
        self._modules[manifest.plugin_id] = module
        return module
