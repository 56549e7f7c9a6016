"""Tests for the signal badge catalogue."""

from stock_research.scoring.signals import SIGNAL_CONFIG, SignalType, get_signal_config


class TestSignalConfig:
    """Tests for SIGNAL_CONFIG."""

    def test_every_type_configured(self) -> None:
        """All 23 signal types have a badge."""
        assert len(SignalType) == 23
        assert set(SIGNAL_CONFIG) == set(SignalType)

    def test_categories(self) -> None:
        """12 action signals and 11 quality signals."""
        categories = [config.category for config in SIGNAL_CONFIG.values()]
        assert categories.count("action") == 12
        assert categories.count("quality") == 11

    def test_css_classes_unique(self) -> None:
        """Each badge has its own style class."""
        classes = [config.css_class for config in SIGNAL_CONFIG.values()]
        assert len(set(classes)) == len(classes)

    def test_to_dict(self) -> None:
        """Serialized config has all display fields."""
        data = SIGNAL_CONFIG[SignalType.HOLD].to_dict()
        assert data == {
            "label": "Hold",
            "css_class": "hold",
            "description": "Quality stock, keep holding",
            "category": "action",
        }


class TestGetSignalConfig:
    """Tests for get_signal_config."""

    def test_by_string(self) -> None:
        """Raw type strings resolve."""
        config = get_signal_config("DIP_OPPORTUNITY")
        assert config.label == "Buy the dip"
        assert config.category == "action"

    def test_by_enum(self) -> None:
        """Enum members resolve."""
        assert get_signal_config(SignalType.CONVICTION).category == "quality"

    def test_unknown_falls_back_to_neutral(self) -> None:
        """Unknown and missing types use the neutral badge."""
        neutral = SIGNAL_CONFIG[SignalType.NEUTRAL]
        assert get_signal_config("MOON_SHOT") == neutral
        assert get_signal_config(None) == neutral
