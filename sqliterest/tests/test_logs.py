"""
Operation log buffer and host log handler.
"""
import logging
import unittest

from sqliterest.logs import (
    LogContext,
    clear_logs,
    configure_log_buffer,
    search_operation_logs,
    set_log_handler,
)


class TestOperationLogs(unittest.TestCase):

    def setUp(self):
        configure_log_buffer(500)
        clear_logs()

    def tearDown(self):
        set_log_handler(None)
        configure_log_buffer(500)

    def test_write_and_search_newest_first(self):
        for i in range(3):
            log = LogContext("CREATE_ROW")
            log.set_entity("Product", i)
            log.set_payload({"name": f"n{i}"})
            log.write("OK")

        total, items = search_operation_logs(None, None, None, None, 1, 20)
        self.assertEqual(total, 3)
        self.assertEqual([r["entity_id"] for r in items], ["2", "1", "0"])
        self.assertIsInstance(items[0]["latency_ms"], int)

    def test_filters_and_paging(self):
        LogContext("CREATE_ROW").write("OK")
        err = LogContext("EXECUTE_SQL")
        err.set_payload({"sql": "DROP TABLE x"})
        err.write("ERROR", "no such table: x")

        total, items = search_operation_logs(None, "EXECUTE_SQL", None, None, 1, 20)
        self.assertEqual(total, 1)
        self.assertEqual(items[0]["result"], "ERROR")

        total, _ = search_operation_logs("DROP TABLE", None, None, None, 1, 20)
        self.assertEqual(total, 1)
        total, _ = search_operation_logs("no such table", None, None, None, 1, 20)
        self.assertEqual(total, 1)

        total, items = search_operation_logs(None, None, None, None, 2, 1)
        self.assertEqual(total, 2)
        self.assertEqual(items[0]["action"], "CREATE_ROW")

        total, _ = search_operation_logs(None, None, "9999-01-01", None, 1, 20)
        self.assertEqual(total, 0)

    def test_buffer_keeps_newest(self):
        configure_log_buffer(2)
        for action in ("A", "B", "C"):
            LogContext(action).write("OK")
        total, items = search_operation_logs(None, None, None, None, 1, 20)
        self.assertEqual(total, 2)
        self.assertEqual([r["action"] for r in items], ["C", "B"])

    def test_host_handler_receives_lines(self):
        lines = []
        set_log_handler(lines.append)
        log = LogContext("DELETE_ROW")
        log.set_entity("Product", 4)
        log.write("ERROR", "boom")
        self.assertEqual(len(lines), 1)
        self.assertTrue(lines[0].startswith("DELETE_ROW ERROR"))
        self.assertIn("Product=4", lines[0])
        self.assertIn("err=boom", lines[0])

    def test_emits_on_ops_logger(self):
        with self.assertLogs("sqliterest.ops", level=logging.INFO) as cm:
            LogContext("STARTUP").write("OK")
        self.assertTrue(any("STARTUP OK" in m for m in cm.output))

    def test_record_fields(self):
        log = LogContext("UPDATE_ROW")
        log.set_entity("Product", 1)
        log.set_payload({"name": "x"})
        log.set_after({"rowsAffected": 1})
        rec = log.write("OK")
        self.assertNotIn("before_json", rec)
        self.assertEqual(rec["after_json"], '{"rowsAffected": 1}')
        self.assertEqual(rec["payload_json"], '{"name": "x"}')
