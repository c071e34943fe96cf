"""
Tests for FileOutputStore and SupabaseMetadataStore.
"""

import json
from unittest.mock import MagicMock

import pytest

from componentizer.services.models import BoundingBox, GeneratedComponent, Region, SectionType
from componentizer.services.stores import FileOutputStore, SupabaseMetadataStore
from componentizer.services.synthesis import VariantSynthesizer


async def _component(section_type=SectionType.FEATURES):
    region = Region(
        type=section_type,
        bounding_box=BoundingBox(x=0, y=0, width=1200, height=400),
        html_snapshot="<section><h2>Fast</h2><p>Very fast.</p></section>",
    )
    result = await VariantSynthesizer().synthesize(region)
    return result.to_component(region)


class TestFileOutputStore:
    @pytest.mark.asyncio
    async def test_layout(self, tmp_path):
        store = FileOutputStore(str(tmp_path))
        component = await _component()

        directory = store.save_component(component)

        assert directory == tmp_path / "components" / "Features"
        assert (directory / "Features.tsx").read_text() == component.variants[0].code
        assert (directory / "index.ts").read_text() == "export { default } from './Features';\n"
        for stem in ("variant-a", "variant-b", "variant-c"):
            assert (directory / "variants" / f"{stem}.tsx").exists()

        metadata = json.loads((directory / "metadata.json").read_text())
        assert metadata["type"] == "features"
        assert [v["file"] for v in metadata["variants"]] == [
            "variants/variant-a.tsx", "variants/variant-b.tsx", "variants/variant-c.tsx",
        ]

    @pytest.mark.asyncio
    async def test_duplicate_names_get_suffix(self, tmp_path):
        store = FileOutputStore(str(tmp_path))
        store.save_component(await _component())
        second = store.save_component(await _component())

        assert second.name == "Features2"
        assert (second / "Features2.tsx").exists()
        assert store.saved_names == ["Features", "Features2"]

    @pytest.mark.asyncio
    async def test_index(self, tmp_path):
        store = FileOutputStore(str(tmp_path))
        store.save_component(await _component(SectionType.HERO))
        store.save_component(await _component(SectionType.FOOTER))

        index = store.write_index().read_text()
        assert "export { default as Hero } from './Hero';" in index
        assert "export { default as Footer } from './Footer';" in index

    def test_failed_component_is_rejected(self, tmp_path):
        region = Region(type=SectionType.HERO)
        component = GeneratedComponent.from_variants(region, [])

        with pytest.raises(ValueError, match="no variants"):
            FileOutputStore(str(tmp_path)).save_component(component)


class TestSupabaseMetadataStore:
    @pytest.mark.asyncio
    async def test_inserts_component_and_variants(self):
        client = MagicMock()
        client.table.return_value.insert.return_value.execute.return_value = MagicMock(data=[{"id": "row-1"}])
        component = await _component()

        component_id = SupabaseMetadataStore(supabase_client=client).save_component(component, "site")

        assert component_id == "row-1"
        inserts = client.table.return_value.insert.call_args_list
        record = inserts[0].args[0]
        assert record["website_id"] == "site"
        assert record["status"] == "pending"
        rows = inserts[1].args[0]
        assert len(rows) == 3
        assert all(row["component_id"] == "row-1" for row in rows)

    def test_failed_component_has_no_variant_rows(self):
        client = MagicMock()
        client.table.return_value.insert.return_value.execute.return_value = MagicMock(data=[])
        component = GeneratedComponent.from_variants(Region(type=SectionType.CTA), [], error_message="boom")

        component_id = SupabaseMetadataStore(supabase_client=client).save_component(component, "site")

        assert component_id == component.id
        assert client.table.return_value.insert.call_count == 1
        assert client.table.return_value.insert.call_args.args[0]["error_message"] == "boom"
