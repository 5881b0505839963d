import json
import os
import shutil
import tempfile
import unittest

from umrah_core.data_store import (DEFAULT_DATA_DIR, check_references, load_tables,
                                   load_tables_from_dir)
from umrah_core.errors import ContentLoadError
from umrah_core.schema_validator import validate_file_key
from umrah_core.utils import read_json_file

DUAS = {
    "a": {"id": "a", "category": [], "type": "short", "arabic": "ا", "transliteration": "a",
          "translation": "A", "source": "S", "citation": {"type": "quran"}},
    "b": {"category": ["sai"], "type": "full", "arabic": "ب", "transliteration": "b",
          "translation": "B", "source": "S", "label": "Sunnah"},
}
THEMES = {
    "t1": {"id": "t1", "title": "One", "duas": {"required": ["a"], "pool": ["b", "ghost"], "count": 1}},
}
ROUNDS = {
    "tawaf": {"umrah": [{"number": 1, "theme": "t1"}, {"number": 2, "theme": "missing"}]},
}


class LoadTablesTests(unittest.TestCase):

    def load(self, duas=DUAS, themes=THEMES, rounds=ROUNDS):
        return load_tables(json.dumps(duas), json.dumps(themes), json.dumps(rounds))

    def test_tables_keyed_by_id(self):
        tables = self.load()
        self.assertEqual(set(tables.duas), {"a", "b"})
        self.assertEqual(tables.duas["a"].citation.type, "quran")
        self.assertEqual(tables.themes["t1"].duas.pool, ["b", "ghost"])
        self.assertEqual(tables.themes["t1"].duas.count, 1)

    def test_missing_id_filled_from_key(self):
        tables = self.load()
        self.assertEqual(tables.duas["b"].id, "b")
        self.assertEqual(tables.duas["b"].label, "Sunnah")

    def test_mapping_key_wins_over_id_field(self):
        duas = dict(DUAS, b=dict(DUAS["b"], id="a"))
        tables = self.load(duas=duas)
        self.assertEqual(tables.duas["b"].id, "b")
        self.assertEqual(sorted(d.id for d in tables.duas.values()), ["a", "b"])

    def test_rounds_keep_nesting_and_order(self):
        tables = self.load()
        rounds = tables.rounds["tawaf"]["umrah"]
        self.assertEqual([r.number for r in rounds], [1, 2])
        self.assertEqual(rounds[0].key, "tawaf-umrah-1")
        self.assertEqual(tables.find_round("tawaf", "umrah", 2).theme, "missing")
        self.assertIsNone(tables.find_round("sai", "umrah", 1))

    def test_malformed_json_names_document(self):
        with self.assertRaises(ContentLoadError) as ctx:
            load_tables(json.dumps(DUAS), "{not json", json.dumps(ROUNDS))
        self.assertEqual(ctx.exception.document, "themes.json")
        self.assertIn("themes.json", str(ctx.exception))

    def test_non_object_document_rejected(self):
        with self.assertRaises(ContentLoadError) as ctx:
            load_tables("[]", json.dumps(THEMES), json.dumps(ROUNDS))
        self.assertEqual(ctx.exception.document, "duas.json")

    def test_bad_round_entry_rejected(self):
        with self.assertRaises(ContentLoadError) as ctx:
            self.load(rounds={"tawaf": {"umrah": [{"number": "x"}]}})
        self.assertEqual(ctx.exception.document, "rounds.json")

    def test_schema_is_not_enforced_at_load(self):
        # A dua without arabic is still loadable; the editor rejects it at write time
        tables = self.load(duas={"a": {"id": "a", "translation": "A"}})
        self.assertEqual(tables.duas["a"].arabic, "")

    def test_check_references_reports_dangling_ids(self):
        warnings = check_references(self.load())
        self.assertEqual({(w.target, w.missing_id) for w in warnings},
                         {("duas", "ghost"), ("themes", "missing")})
        dua_warning = next(w for w in warnings if w.missing_id == "ghost")
        self.assertEqual(dua_warning.source, "themes/t1/duas/pool")
        self.assertIn("ghost", dua_warning.message)


class ShippedContentTests(unittest.TestCase):

    def test_shipped_documents_match_their_schemas(self):
        for key in ("duas", "themes", "rounds"):
            document = read_json_file(os.path.join(DEFAULT_DATA_DIR, f"{key}.json"))
            self.assertEqual(validate_file_key(key, document), [], key)

    def test_shipped_documents_have_no_dangling_references(self):
        tables = load_tables_from_dir()
        self.assertEqual(check_references(tables), [])
        self.assertEqual(len(tables.rounds["tawaf"]["umrah"]), 7)
        self.assertEqual(len(tables.rounds["sai"]["umrah"]), 7)

    def test_missing_file_raises_content_load_error(self):
        tmp = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, tmp)
        shutil.copy(os.path.join(DEFAULT_DATA_DIR, "duas.json"), tmp)
        with self.assertRaises(ContentLoadError) as ctx:
            load_tables_from_dir(tmp)
        self.assertEqual(ctx.exception.document, "themes.json")


if __name__ == "__main__":
    unittest.main()
