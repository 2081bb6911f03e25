"""
Tests for FitConfig validation and the logging setup helper.
"""

import logging

import numpy as np
import pytest

from pcafit import FitConfig, Segment, fit_line, setup_logging
from pcafit.config import DEFAULT_CONFIG, resolve_config


@pytest.fixture
def package_logger():
    """Restore the package logger after a test reconfigures it."""
    logger = logging.getLogger("pcafit")
    handlers = list(logger.handlers)
    level = logger.level
    yield logger
    for handler in list(logger.handlers):
        if handler not in handlers:
            handler.close()
            logger.removeHandler(handler)
    for handler in handlers:
        if handler not in logger.handlers:
            logger.addHandler(handler)
    logger.setLevel(level)


class TestFitConfig:
    """Tests for the FitConfig dataclass."""

    def test_defaults(self):
        """Default configuration is shared."""
        assert resolve_config() is DEFAULT_CONFIG
        assert resolve_config(None) == FitConfig()

    def test_override(self):
        """A given config is used as is."""
        config = FitConfig(isotropy_rtol=0.0, jacobi_sweeps=3)
        assert resolve_config(config) is config

    @pytest.mark.parametrize("field", ['degeneracy_eps', 'isotropy_rtol', 'eigen_gap_rtol'])
    @pytest.mark.parametrize("value", [-1e-6, np.nan])
    def test_bad_tolerance(self, field, value):
        with pytest.raises(ValueError, match=field):
            FitConfig(**{field: value})

    def test_bad_sweeps(self):
        with pytest.raises(ValueError, match="jacobi_sweeps"):
            FitConfig(jacobi_sweeps=0)

    def test_frozen(self):
        with pytest.raises(AttributeError):
            DEFAULT_CONFIG.isotropy_rtol = 0.5


class TestSetupLogging:
    """Tests for setup_logging() function."""

    def test_returns_package_logger(self, package_logger):
        logger = setup_logging(logging.DEBUG)
        assert logger is package_logger
        assert logger.level == logging.DEBUG

    def test_repeated_calls(self, package_logger):
        """Calling twice does not duplicate console handlers."""
        setup_logging()
        setup_logging()
        streams = [h for h in package_logger.handlers
                   if isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)]
        assert len(streams) == 1

    def test_log_file(self, package_logger, tmp_path):
        """Fit diagnostics end up in the log file."""
        log_file = tmp_path / "fit.log"
        setup_logging(logging.DEBUG, log_file=str(log_file))

        fit_line([Segment([0.0, 0.0], [1.0, 1.0])])

        for handler in package_logger.handlers:
            handler.flush()
        text = log_file.read_text(encoding='utf-8')
        assert "Fitting line" in text
        assert "pcafit.fitting.least_squares" in text


class TestDiagnostics:
    """Warnings emitted during fitting."""

    def test_isotropic_warning(self, caplog):
        """The isotropic fallback is logged, not raised."""
        cross = [Segment([-1.0, 0.0], [1.0, 0.0]), Segment([0.0, -1.0], [0.0, 1.0])]
        with caplog.at_level(logging.WARNING, logger="pcafit"):
            result = fit_line(cross)
        assert result.isotropic
        assert any(r.levelno == logging.WARNING and "Isotropic" in r.getMessage()
                   for r in caplog.records)

    def test_regular_fit_is_quiet(self, caplog):
        with caplog.at_level(logging.WARNING, logger="pcafit"):
            fit_line([Segment([0.0, 0.0], [3.0, 1.0])])
        assert not caplog.records


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
