"""
Output stores for generated components.

FileOutputStore writes component source trees to disk;
SupabaseMetadataStore records components and variants in Supabase.
The two are independent: a metadata failure never undoes a file write.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..core.config import Config
from .models import GeneratedComponent

logger = logging.getLogger(__name__)


class FileOutputStore:
    """
    Writes generated components under {root}/components.

    Layout per component:
        components/{Name}/{Name}.tsx          selected (or first) variant
        components/{Name}/index.ts
        components/{Name}/variants/variant-{a|b|c}.tsx
        components/{Name}/metadata.json

    A second component with the same name gets a numeric suffix (Features2).
    """

    def __init__(self, root: str):
        self.root = Path(root)
        self.components_dir = self.root / "components"
        self._used_names: Dict[str, int] = {}
        self.saved_names: List[str] = []

    def _directory_name(self, component: GeneratedComponent) -> str:
        count = self._used_names.get(component.name, 0) + 1
        self._used_names[component.name] = count
        return component.name if count == 1 else f"{component.name}{count}"

    def save_component(self, component: GeneratedComponent) -> Path:
        """
        Write one component's files.

        Returns:
            The component directory

        Raises:
            ValueError: If the component has no variants
            OSError: If a file cannot be written
        """
        primary = component.primary_variant()
        if primary is None:
            raise ValueError(f"Cannot save {component.name}: no variants")

        name = self._directory_name(component)
        component_dir = self.components_dir / name
        variants_dir = component_dir / "variants"
        variants_dir.mkdir(parents=True, exist_ok=True)

        for variant in component.variants:
            (variants_dir / f"{variant.file_stem}.tsx").write_text(variant.code, encoding="utf-8")

        (component_dir / f"{name}.tsx").write_text(primary.code, encoding="utf-8")
        (component_dir / "index.ts").write_text(
            f"export {{ default }} from './{name}';\n", encoding="utf-8"
        )

        metadata = {
            "id": component.id,
            "type": component.type.value,
            "name": name,
            "order": component.order,
            "selected_variant": primary.id,
            "variants": [
                {
                    "id": v.id,
                    "name": v.name,
                    "strategy": v.strategy.value,
                    "description": v.description,
                    "file": f"variants/{v.file_stem}.tsx",
                    "accuracy_score": v.accuracy_score,
                    "preview_image": v.preview_image,
                }
                for v in component.variants
            ],
            "created_at": component.created_at.isoformat(),
        }
        (component_dir / "metadata.json").write_text(json.dumps(metadata, indent=2), encoding="utf-8")

        self.saved_names.append(name)
        logger.info(f"Saved {name} with {len(component.variants)} variants to {component_dir}")
        return component_dir

    def write_index(self, names: Optional[List[str]] = None) -> Path:
        """Write components/index.ts re-exporting every saved component."""
        names = self.saved_names if names is None else names
        self.components_dir.mkdir(parents=True, exist_ok=True)
        lines = [f"export {{ default as {name} }} from './{name}';" for name in names]
        path = self.components_dir / "index.ts"
        path.write_text("\n".join(lines) + ("\n" if lines else ""), encoding="utf-8")
        return path


class SupabaseMetadataStore:
    """
    Records generated components and their variants in Supabase.

    Tables (names from Config):
        components:          one row per component
        component_variants:  one row per variant, keyed by component_id
    """

    def __init__(self, supabase_client: Optional[Any] = None):
        if supabase_client is None:
            from ..core.database import get_supabase_client
            supabase_client = get_supabase_client()
        self.supabase = supabase_client
        self.components_table = Config.COMPONENTS_TABLE
        self.variants_table = Config.VARIANTS_TABLE

    def save_component(self, component: GeneratedComponent, website_id: str) -> str:
        """
        Insert one component row and its variant rows.

        Returns:
            The stored component id

        Raises:
            Exception: Whatever the Supabase client raises; callers record it
        """
        record = {
            "id": component.id,
            "website_id": website_id,
            "type": component.type.value,
            "name": component.name,
            "order_index": component.order,
            "status": component.status.value,
            "selected_variant": component.selected_variant,
            "error_message": component.error_message,
            "created_at": component.created_at.isoformat(),
        }
        result = self.supabase.table(self.components_table).insert(record).execute()
        component_id = result.data[0]["id"] if result.data else component.id

        if component.variants:
            rows = [
                {
                    "id": v.id,
                    "component_id": component_id,
                    "variant_name": v.name,
                    "strategy": v.strategy.value,
                    "description": v.description,
                    "code": v.code,
                    "accuracy_score": v.accuracy_score,
                    "preview_image": v.preview_image,
                }
                for v in component.variants
            ]
            self.supabase.table(self.variants_table).insert(rows).execute()

        logger.info(f"Recorded {component.name} ({len(component.variants)} variants) for {website_id}")
        return component_id
