import unittest

from vm_bootstrap.errors import PermissionDenied
from vm_bootstrap.errors import SubprocessFailed
from vm_bootstrap.lib.command import run_cmd


class RunCmd(unittest.TestCase):

    def test_success_captures_output(self):
        r = run_cmd(["sh", "-c", "echo hello"])
        self.assertEqual(r.returncode, 0)
        self.assertEqual(r.stdout.strip(), "hello")

    def test_input_text(self):
        r = run_cmd(["cat"], input_text="piped\n")
        self.assertEqual(r.stdout, "piped\n")

    def test_failure_raises(self):
        with self.assertRaises(SubprocessFailed) as cm:
            run_cmd(["sh", "-c", "echo oops >&2; exit 3"])
        self.assertEqual(cm.exception.returncode, 3)
        self.assertIn("oops", cm.exception.stderr)
        self.assertNotIsInstance(cm.exception, PermissionDenied)

    def test_failure_without_check(self):
        r = run_cmd(["sh", "-c", "exit 2"], check=False)
        self.assertEqual(r.returncode, 2)

    def test_permission_denied(self):
        with self.assertRaises(PermissionDenied):
            run_cmd(["sh", "-c", "echo 'tee: /etc/x: Permission denied' >&2; exit 1"])

    def test_missing_program(self):
        with self.assertRaises(SubprocessFailed) as cm:
            run_cmd(["definitely-not-a-real-program-3f9a"])
        self.assertEqual(cm.exception.returncode, 127)

    def test_dry_run_does_not_execute(self):
        r = run_cmd(["sh", "-c", "exit 9"], dry_run=True)
        self.assertEqual(r.returncode, 0)


if __name__ == '__main__':
    unittest.main()
