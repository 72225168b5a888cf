"""End-to-end tests: loading loosely typed input into typed structures."""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import msgspec
import numpy as np

from dynkit import (
    AttrRef,
    RegisteredType,
    Var,
    ref_at,
    set_robust,
    string_json,
    to_string,
)
from dynkit.serial import dec_hook, enc_hook


@dataclass
class Limits:
    rate: float = 0.0
    burst: int = 0


@dataclass
class ServiceConfig:
    name: str = ""
    port: np.uint16 = np.uint16(0)
    debug: bool = False
    ratio: np.float32 = np.float32(0)
    tags: List[str] = field(default_factory=list)
    limits: Limits = field(default_factory=Limits)
    env: Dict[str, int] = field(default_factory=dict)
    owner: Optional[str] = None


class Handler(msgspec.Struct):
    name: str
    kind: RegisteredType


class TestLoadFromStrings:
    """Environment-style string input into a typed config."""

    def test_every_field_from_text(self):
        cfg = ServiceConfig()
        raw = {
            "name": "api",
            "port": "8080",
            "debug": "T",
            "ratio": "0.25",
            "tags": '["blue", "green"]',
            "limits": '{"rate": 2.5}',
            "env": '{"WORKERS": 4}',
        }

        results = {key: set_robust(AttrRef(cfg, key), value) for key, value in raw.items()}

        assert all(results.values())
        assert cfg.name == "api"
        assert cfg.port == 8080 and isinstance(cfg.port, np.uint16)
        assert cfg.debug is True
        assert cfg.ratio == np.float32(0.25)
        assert cfg.tags == ["blue", "green"]
        assert cfg.limits == Limits(rate=2.5, burst=0)
        assert cfg.env == {"WORKERS": 4}

    def test_bad_fields_are_reported_and_skipped(self, caplog, logger):
        cfg = ServiceConfig(port=np.uint16(80))
        with caplog.at_level(logging.DEBUG, logger=logger.name):
            ok_port = set_robust(AttrRef(cfg, "port"), "eighty", logger=logger)
            ok_limits = set_robust(AttrRef(cfg, "limits"), '{"burst": "x"}', logger=logger)

        assert (ok_port, ok_limits) == (False, False)
        assert cfg.port == 80
        assert cfg.limits == Limits()
        assert any("struct from string" in r.getMessage() for r in caplog.records)

    def test_containers_from_other_containers(self):
        cfg = ServiceConfig()

        assert set_robust(AttrRef(cfg, "tags"), (1, 2.5, True))
        assert set_robust(AttrRef(cfg, "env"), {"A": "1", "B": 2.9})

        assert cfg.tags == ["1", "2.5", "true"]
        assert cfg.env == {"A": 1, "B": 2}

    def test_optional_field(self):
        """None clears an Optional field; other values convert to its type."""
        cfg = ServiceConfig(owner="ops")

        assert set_robust(AttrRef(cfg, "owner"), None)
        assert cfg.owner is None

        assert set_robust(AttrRef(cfg, "owner"), 42)
        assert cfg.owner == "42"


class TestDocumentPatching:
    """Pointer-addressed updates of nested documents."""

    def test_normalise_document(self, sample_doc):
        """Convert stringly-typed leaves in place."""
        for ptr, tp in [
            ("/server/ports/0", int),
            ("/server/ports/1", int),
            ("/limits/rate", float),
            ("/flags/0", bool),
            ("/flags/1", bool),
            ("/flags/2", bool),
        ]:
            assert set_robust(ref_at(sample_doc, ptr, type=tp), ref_at(sample_doc, ptr).get())

        assert sample_doc["server"]["ports"] == [80, 443]
        assert sample_doc["limits"] == {"rate": 2.5, "burst": 10}
        assert sample_doc["flags"] == [True, False, False]

    def test_copy_subtree_into_typed_var(self, sample_doc):
        ports = Var(List[np.uint16])

        assert set_robust(ports, ref_at(sample_doc, "/server/ports"))
        assert ports.value == [80, 443]
        assert all(isinstance(p, np.uint16) for p in ports.value)

    def test_create_and_fill(self):
        doc = {"a": {"b": []}}
        assert set_robust(ref_at(doc, "/a/b/-", create=True, type=float), "1.5")
        assert doc == {"a": {"b": [1.5]}}


class TestTypeDescriptors:
    """RegisteredType in configuration round trips."""

    def test_struct_round_trip(self, registry):
        registry.add(Limits)
        handler = Handler("rate-limit", RegisteredType(Limits, registry))

        data = msgspec.json.encode(handler, enc_hook=enc_hook)
        assert msgspec.json.decode(data)["kind"] == registry.type_name(Limits)

        xml = handler.kind.to_xml("Kind")
        assert RegisteredType.from_xml(xml, "Kind", registry) == handler.kind

    def test_decode_with_default_registry(self):
        from dynkit import types

        types.add(ServiceConfig)
        data = msgspec.json.encode({"name": "svc", "kind": types.type_name(ServiceConfig)})
        handler = msgspec.json.decode(data, type=Handler, dec_hook=dec_hook)

        assert handler.kind.t is ServiceConfig
        assert to_string(handler.kind) == types.type_name(ServiceConfig)

    def test_debug_rendering(self, registry):
        registry.add(Limits)
        text = string_json({"kind": RegisteredType(Limits, registry), "limit": Limits(1.5, 2)})

        assert msgspec.json.decode(text) == {
            "kind": registry.type_name(Limits),
            "limit": {"rate": 1.5, "burst": 2},
        }
