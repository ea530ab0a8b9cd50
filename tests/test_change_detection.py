"""Tests for change detector and callback registry."""

import logging

import pytest
from unittest.mock import Mock

from ondeestou.address import StandardizedAddress
from ondeestou.callback_registry import CallbackRegistry
from ondeestou.change_detector import AddressChangeDetector


CENTRO = StandardizedAddress(logradouro="Rua A", bairro="Centro", municipio="Recife")
BOA_VISTA = StandardizedAddress(logradouro="Rua A", bairro="Boa Vista", municipio="Recife")


class TestAddressChangeDetector:
    """Test one-shot transition detection."""

    def test_transition_reported_once(self):
        detector = AddressChangeDetector()

        assert detector.has_field_changed("bairro", BOA_VISTA, CENTRO)
        assert detector.get_field_signature("bairro") == "Centro=>Boa Vista"
        assert not detector.has_field_changed("bairro", BOA_VISTA, CENTRO)

    def test_unchanged_field(self):
        detector = AddressChangeDetector()
        assert not detector.has_field_changed("logradouro", BOA_VISTA, CENTRO)
        assert detector.get_field_signature("logradouro") is None

    def test_missing_side_is_not_a_change(self):
        detector = AddressChangeDetector()
        assert not detector.has_field_changed("bairro", CENTRO, None)
        assert not detector.has_field_changed("bairro", None, CENTRO)

    def test_new_transition_replaces_signature(self):
        """Test going back is a different transition and is reported."""
        detector = AddressChangeDetector()
        detector.has_field_changed("bairro", BOA_VISTA, CENTRO)

        assert detector.has_field_changed("bairro", CENTRO, BOA_VISTA)
        assert detector.get_field_signature("bairro") == "Boa Vista=>Centro"

    def test_clear_signature_allows_repeat(self):
        detector = AddressChangeDetector()
        detector.has_field_changed("bairro", BOA_VISTA, CENTRO)

        assert detector.clear_field_signature("bairro")
        assert not detector.clear_field_signature("bairro")
        assert detector.has_field_changed("bairro", BOA_VISTA, CENTRO)

        detector.clear_all_signatures()
        assert detector.tracked_fields() == []

    def test_change_details(self):
        detector = AddressChangeDetector()
        details = detector.get_change_details("bairro", BOA_VISTA, CENTRO)

        assert details.from_value == "Centro"
        assert details.to_value == "Boa Vista"
        assert details.as_dict() == {
            "from": "Centro",
            "to": "Boa Vista",
            "field": "bairro",
            "currentAddress": BOA_VISTA,
            "previousAddress": CENTRO,
        }


class TestCallbackRegistry:
    """Test callback registration and isolated execution."""

    def test_register_and_execute(self):
        registry = CallbackRegistry()
        callback = Mock()
        registry.register("bairro", callback)

        assert registry.has("bairro")
        assert registry.execute("bairro", "details") is True
        callback.assert_called_once_with("details")

    def test_execute_without_callback(self):
        assert CallbackRegistry().execute("bairro") is False

    def test_register_none_removes(self):
        registry = CallbackRegistry()
        registry.register("bairro", Mock())
        registry.register("bairro", None)

        assert not registry.has("bairro")
        assert len(registry) == 0

    def test_non_callable_rejected(self):
        registry = CallbackRegistry()
        with pytest.raises(TypeError, match="must be a function or None"):
            registry.register("bairro", "not a function")

    def test_callback_error_is_logged_and_contained(self, caplog):
        registry = CallbackRegistry()
        registry.register("bairro", Mock(side_effect=RuntimeError("boom")))
        other = Mock()
        registry.register("municipio", other)

        with caplog.at_level(logging.ERROR):
            assert registry.execute("bairro", "details") is False
        assert registry.execute("municipio", "details") is True

        other.assert_called_once()
        assert "Error executing callback for 'bairro'" in caplog.text

    def test_unregister_and_clear(self):
        registry = CallbackRegistry()
        registry.register("bairro", Mock())
        registry.register("logradouro", Mock())

        assert registry.registered_types() == ["bairro", "logradouro"]
        assert registry.unregister("bairro")
        assert not registry.unregister("bairro")

        registry.clear()
        assert registry.get("logradouro") is None
