import unittest
from click.testing import CliRunner

from entry_vault.cli.commands import AppState, cli, format_timestamp
from entry_vault.cli.session import Session
from entry_vault.core.selector import FieldSelector
from entry_vault.core.store import EntryStore


class FakeClock:
    def __init__(self, start=0.0):
        self.now = start

    def __call__(self):
        return self.now


class TestEntryVaultCli(unittest.TestCase):
    def setUp(self):
        """Give every test its own store and an unlocked session"""
        self.runner = CliRunner()
        self.store = EntryStore.with_defaults()
        self.clock = FakeClock()
        self.session = Session(self.store.idle_timeout, clock=self.clock)
        self.session.unlock()
        self.state = AppState(self.store, self.session)

    def invoke(self, args, **kwargs):
        return self.runner.invoke(cli, args, obj=self.state, **kwargs)

    def test_ls(self):
        self.store.add("Email")
        result = self.invoke(['ls'])
        self.assertEqual(result.exit_code, 0)
        self.assertLess(result.output.index('2: Email'), result.output.index('1: Bank'))

    def test_ls_empty(self):
        self.state.store = EntryStore()
        result = self.invoke(['ls'])
        self.assertIn('No entries.', result.output)

    def test_add(self):
        result = self.invoke(['add', 'Email'])
        self.assertEqual(result.exit_code, 0)
        self.assertIn("Entry 'Email' added with ID: 2", result.output)
        self.assertEqual(self.store.get_by_id(2).title, 'Email')

    def test_show_masks_password(self):
        result = self.invoke(['show', '1'])
        self.assertEqual(result.exit_code, 0)
        self.assertIn('Username: Dom', result.output)
        self.assertIn('Password: ********', result.output)
        self.assertIn('[0] Notes: These are my bank deets', result.output)
        self.assertNotIn('totally_secure_password!1', result.output)

    def test_show_reveal(self):
        result = self.invoke(['show', '1', '--reveal'])
        self.assertIn('Password: totally_secure_password!1', result.output)

    def test_show_missing_entry(self):
        result = self.invoke(['show', '7'])
        self.assertNotEqual(result.exit_code, 0)
        self.assertIn('Entry 7 not found.', result.output)

    def test_edit_username(self):
        result = self.invoke(['edit', '1', 'username', 'alice'])
        self.assertEqual(result.exit_code, 0)
        self.assertIn('Updated Username of entry 1.', result.output)
        self.assertEqual(self.store.current(1, FieldSelector.USERNAME), 'alice')

    def test_edit_dynamic_field(self):
        result = self.invoke(['edit', '1', '0', 'new notes'])
        self.assertIn('Updated Notes of entry 1.', result.output)
        self.assertEqual(self.store.current(1, FieldSelector.dynamic(0)), 'new notes')

    def test_edit_id_refused(self):
        result = self.invoke(['edit', '1', 'id', '5'])
        self.assertNotEqual(result.exit_code, 0)
        self.assertIn("Can't change the ID of an entry", result.output)

    def test_edit_missing_field(self):
        result = self.invoke(['edit', '1', '9', 'x'])
        self.assertNotEqual(result.exit_code, 0)
        self.assertIn('Entry 1 has no field Fields-9.', result.output)

    def test_edit_bad_field_name(self):
        result = self.invoke(['edit', '1', 'colour', 'blue'])
        self.assertEqual(result.exit_code, 2)

    def test_history(self):
        self.store.edit_field(1, FieldSelector.USERNAME, 'alice')
        result = self.invoke(['history', '1', 'username'])
        self.assertEqual(result.exit_code, 0)
        self.assertLess(result.output.index('alice'), result.output.index('Dom'))
        self.assertIn(format_timestamp(1702851212), result.output)

    def test_history_of_password_is_masked(self):
        result = self.invoke(['history', '1', 'password'])
        self.assertNotIn('totally_secure_password!1', result.output)
        result = self.invoke(['history', '1', 'password', '--reveal'])
        self.assertIn('totally_secure_password!1', result.output)

    def test_history_missing_field(self):
        result = self.invoke(['history', '1', '9'])
        self.assertNotEqual(result.exit_code, 0)
        self.assertIn('Entry 1 has no field Fields-9.', result.output)
        self.assertNotIn('1970', result.output)

    def test_history_of_title(self):
        result = self.invoke(['history', '1', 'title'])
        self.assertIn('Title has no history.', result.output)

    def test_add_and_rename_field(self):
        result = self.invoke(['add-field', '1', 'PIN'])
        self.assertIn("Field 'PIN' added to entry 1 with ID: 1", result.output)
        result = self.invoke(['rename-field', '1', '1', 'Card PIN'])
        self.assertEqual(result.exit_code, 0)
        self.assertEqual(self.store.field_name(1, FieldSelector.dynamic(1)), 'Card PIN')

    def test_add_field_missing_entry(self):
        result = self.invoke(['add-field', '5', 'PIN'])
        self.assertNotEqual(result.exit_code, 0)

    def test_timeout(self):
        result = self.invoke(['timeout'])
        self.assertIn('Idle timeout: 60 seconds', result.output)
        result = self.invoke(['timeout', '120'])
        self.assertEqual(result.exit_code, 0)
        self.assertEqual(self.store.idle_timeout, 120)
        self.assertEqual(self.session.timeout_seconds, 120)
        result = self.invoke(['timeout', '0'])
        self.assertNotEqual(result.exit_code, 0)

    def test_idle_session_hides_secrets(self):
        self.clock.now += 61
        result = self.invoke(['show', '1', '--reveal'])
        self.assertIn('Vault is locked.', result.output)
        self.assertIn('Password: ********', result.output)
        self.invoke(['unlock'])
        result = self.invoke(['show', '1', '--reveal'])
        self.assertIn('Password: totally_secure_password!1', result.output)

    def test_lock(self):
        self.invoke(['lock'])
        result = self.invoke(['show', '1', '--reveal'])
        self.assertIn('Vault is locked.', result.output)

    def test_shell_keeps_one_store(self):
        result = self.invoke(['shell'], input='add Email\nedit 2 username alice\nls\nexit\n')
        self.assertEqual(result.exit_code, 0)
        self.assertIn("Entry 'Email' added with ID: 2", result.output)
        self.assertIn('2: Email', result.output)
        self.assertIn('Bye.', result.output)
        self.assertEqual(self.store.current(2, FieldSelector.USERNAME), 'alice')

    def test_shell_reports_errors_and_continues(self):
        result = self.invoke(['shell'], input='show 9\nadd "Work mail"\n')
        self.assertEqual(result.exit_code, 0)
        self.assertIn('Entry 9 not found.', result.output)
        self.assertEqual(self.store.get_by_id(2).title, 'Work mail')


if __name__ == '__main__':
    unittest.main()
