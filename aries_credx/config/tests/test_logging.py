import io
import json
import logging

from pathlib import Path
from tempfile import NamedTemporaryFile
from unittest import TestCase, mock

from .. import logging as test_module
from ..error import LoggerAlreadyInitializedError


class TestFilterPattern(TestCase):
    def test_parse(self):
        assert test_module.parse_filter_pattern(None) == (test_module.OFF, {})
        assert test_module.parse_filter_pattern("") == (test_module.OFF, {})
        assert test_module.parse_filter_pattern("info") == (logging.INFO, {})
        assert test_module.parse_filter_pattern(
            "warn, aries_credx.encoding=trace,other=OFF"
        ) == (
            logging.WARNING,
            {"aries_credx.encoding": test_module.TRACE, "other": test_module.OFF},
        )
        assert test_module.parse_filter_pattern("aries_credx") == (
            test_module.OFF,
            {"aries_credx": test_module.TRACE},
        )
        assert test_module.parse_filter_pattern("a=loud,=debug") == (
            test_module.OFF,
            {},
        )

    def test_callback_level(self):
        assert test_module.callback_level(logging.CRITICAL) == test_module.LEVEL_ERROR
        assert test_module.callback_level(logging.ERROR) == test_module.LEVEL_ERROR
        assert test_module.callback_level(logging.WARNING) == test_module.LEVEL_WARN
        assert test_module.callback_level(logging.INFO) == test_module.LEVEL_INFO
        assert test_module.callback_level(logging.DEBUG) == test_module.LEVEL_DEBUG
        assert test_module.callback_level(test_module.TRACE) == test_module.LEVEL_TRACE


class TestCallbackLogHandler(TestCase):
    def setUp(self):
        self.logger = logging.getLogger("aries_credx.tests.callback")
        self.logger.propagate = False
        self.logger.setLevel(test_module.TRACE)
        self.context = object()
        self.records = []

    def tearDown(self):
        for handler in list(self.logger.handlers):
            self.logger.removeHandler(handler)

    def log(self, *args):
        self.records.append(args)

    def test_forwards_records(self):
        handler = test_module.CallbackLogHandler(self.context, self.log)
        self.logger.addHandler(handler)
        self.logger.warning("encoded %s", "value")
        self.logger.log(test_module.TRACE, "fine detail")

        assert len(self.records) == 2
        context, level, target, message, module, file, line = self.records[0]
        assert context is self.context
        assert level == test_module.LEVEL_WARN
        assert target == "aries_credx.tests.callback"
        assert message == "encoded value"
        assert module == "test_logging"
        assert file.endswith("test_logging.py")
        assert line > 0
        assert self.records[1][1] == test_module.LEVEL_TRACE

    def test_enabled_callback(self):
        enabled = mock.MagicMock(side_effect=lambda ctx, level, target: level <= 2)
        handler = test_module.CallbackLogHandler(self.context, self.log, enabled)
        self.logger.addHandler(handler)
        self.logger.info("dropped")
        self.logger.error("kept")

        assert [rec[3] for rec in self.records] == ["kept"]
        enabled.assert_any_call(
            self.context, test_module.LEVEL_INFO, "aries_credx.tests.callback"
        )

    def test_flush(self):
        flush = mock.MagicMock()
        handler = test_module.CallbackLogHandler(self.context, self.log, flush=flush)
        handler.flush()
        flush.assert_called_once_with(self.context)
        test_module.CallbackLogHandler(self.context, self.log).flush()

    def test_log_callback_error(self):
        handler = test_module.CallbackLogHandler(
            self.context, mock.MagicMock(side_effect=ValueError())
        )
        self.logger.addHandler(handler)
        with mock.patch.object(handler, "handleError") as mock_handle_error:
            self.logger.error("boom")
            mock_handle_error.assert_called_once()


class TestLoggingConfigurator(TestCase):
    def setUp(self):
        self.logger = logging.getLogger("aries_credx.tests.configurator")
        self.logger.propagate = False
        patcher = mock.patch.object(test_module.LoggingConfigurator, "_installed", False)
        patcher.start()
        self.addCleanup(patcher.stop)

    def tearDown(self):
        for handler in list(self.logger.handlers):
            self.logger.removeHandler(handler)

    def test_init_callback_once(self):
        log = mock.MagicMock()
        handler = test_module.LoggingConfigurator.init_callback(
            "ctx", log, logger=self.logger
        )
        assert handler in self.logger.handlers
        assert self.logger.level == test_module.TRACE
        self.logger.debug("hello")
        log.assert_called_once()

        with self.assertRaises(LoggerAlreadyInitializedError):
            test_module.LoggingConfigurator.init_callback(
                "ctx", log, logger=self.logger
            )
        with self.assertRaises(LoggerAlreadyInitializedError):
            test_module.LoggingConfigurator.init_default(logger=self.logger)

    def test_init_default_pattern(self):
        stream = io.StringIO()
        target = logging.getLogger("aries_credx.tests.configurator.target")
        self.addCleanup(target.setLevel, logging.NOTSET)
        test_module.LoggingConfigurator.init_default(
            "error,aries_credx.tests.configurator.target=debug",
            stream=stream,
            logger=self.logger,
        )
        assert self.logger.level == logging.ERROR
        self.logger.warning("hidden")
        target.debug("shown")

        output = stream.getvalue()
        assert "hidden" not in output
        line = output.strip()
        assert line.startswith("DEBUG|aries_credx.tests.configurator.target")
        assert line.endswith("| shown")

    def test_init_default_env(self):
        stream = io.StringIO()
        with mock.patch.dict(test_module.os.environ, {"CREDX_LOG": "info"}):
            test_module.LoggingConfigurator.init_default(
                stream=stream, logger=self.logger
            )
        assert self.logger.level == logging.INFO

    def test_init_default_off(self):
        with mock.patch.dict(test_module.os.environ, clear=True):
            test_module.LoggingConfigurator.init_default(
                stream=io.StringIO(), logger=self.logger
            )
        assert self.logger.level == test_module.OFF

    def test_init_default_json(self):
        stream = io.StringIO()
        test_module.LoggingConfigurator.init_default(
            "info", json_format=True, stream=stream, logger=self.logger
        )
        self.logger.info("structured")
        record = json.loads(stream.getvalue())
        assert record["message"] == "structured"
        assert record["levelname"] == "INFO"

    @mock.patch.object(test_module, "load_resource", autospec=True)
    @mock.patch.object(test_module.logging.config, "fileConfig", autospec=True)
    def test_configure_default(self, mock_file_config, mock_load_resource):
        test_module.LoggingConfigurator.configure()

        mock_load_resource.assert_called_once_with(
            test_module.DEFAULT_LOGGING_CONFIG_PATH_INI, "utf-8"
        )
        mock_file_config.assert_called_once_with(
            mock_load_resource.return_value,
            disable_existing_loggers=False,
        )

    def test_configure_yaml_with_level_and_file(self):
        log_file = NamedTemporaryFile()
        self.addCleanup(log_file.close)
        with mock.patch.object(
            test_module.logging.config, "dictConfig", autospec=True
        ) as mock_dict_config, mock.patch.object(
            test_module.logging, "root", mock.MagicMock(handlers=[])
        ) as mock_root:
            test_module.LoggingConfigurator.configure(
                str(Path(__file__).parent.parent / "default_logging_config.yml"),
                log_level="debug",
                log_file=log_file.name,
            )
            config = mock_dict_config.call_args[0][0]
            assert config["version"] == 1
            mock_root.setLevel.assert_called_once_with("DEBUG")
            assert isinstance(mock_root.handlers[0], logging.FileHandler)
            mock_root.handlers[0].close()

    def test_configure_missing_config(self):
        with mock.patch.object(
            test_module, "load_resource", mock.MagicMock(return_value=None)
        ), mock.patch.object(
            test_module.logging, "basicConfig", mock.MagicMock()
        ) as mock_basic, mock.patch.object(
            test_module.logging, "root", mock.MagicMock(handlers=[])
        ) as mock_root:
            test_module.LoggingConfigurator.configure("missing.ini")
            mock_basic.assert_called_once_with(level=logging.WARNING)
            mock_root.warning.assert_called_once()

    def test_load_resource(self):
        with mock.patch("builtins.open", mock.MagicMock()) as mock_open:
            test_module.load_resource("abc", encoding="utf-8")
            mock_open.side_effect = IOError("insufficient privilege")
            # load_resource should absorb IOError
            assert test_module.load_resource("abc", encoding="utf-8") is None

        with test_module.load_resource(
            test_module.DEFAULT_LOGGING_CONFIG_PATH_INI, "utf-8"
        ) as stream:
            assert "[loggers]" in stream.read()
        with test_module.load_resource(
            test_module.DEFAULT_LOGGING_CONFIG_PATH_INI
        ) as stream:
            assert b"[loggers]" in stream.read()
        assert test_module.load_resource("no_such_package:file.ini") is None
