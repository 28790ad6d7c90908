import json
import unittest
from unittest.mock import patch

from courtclock.models import GamePhase
from courtclock.services import (
    ActivationRequiredError, MatchSession, MemoryStore, expected_key, load_match_state
)
from courtclock.utils import STORAGE_KEYS
from courtclock.utils.constants import DAY_MS, LICENSE_MS, TRIAL_MS

from fakes import FakeClock, FakeTimerBackend


class MatchSessionTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.store = MemoryStore()
        self.backend = FakeTimerBackend()
        self.clock = FakeClock()
        self.session = self._new_session()

    def _new_session(self) -> MatchSession:
        return MatchSession(self.store, timer_backend=self.backend, clock=self.clock)

    def _skip_to(self, phase: GamePhase) -> None:
        while self.session.state.clock.phase != phase:
            self.session.skip()


class ClockControlTests(MatchSessionTestCase):
    def test_initial_state(self) -> None:
        clock = self.session.state.clock
        self.assertEqual(clock.phase, GamePhase.PRE_GAME)
        self.assertEqual(clock.time_left_seconds, 900)
        self.assertFalse(clock.is_running)
        self.assertEqual(self.backend.pending, {})

    def test_running_clock_has_exactly_one_pending_tick(self) -> None:
        self.session.toggle()
        self.assertEqual(len(self.backend.pending), 1)

        self.backend.advance(10)
        self.assertEqual(self.session.state.clock.phase, GamePhase.Q1)
        self.assertEqual(self.session.state.clock.time_left_seconds, 900)
        self.assertEqual(len(self.backend.pending), 1)

        self.backend.advance(5)
        self.assertEqual(self.session.state.clock.time_left_seconds, 895)
        self.assertEqual(len(self.backend.pending), 1)

    def test_pause_cancels_pending_tick(self) -> None:
        self.session.toggle()
        self.backend.advance(3)
        self.session.toggle()

        self.assertEqual(self.backend.pending, {})
        self.assertEqual(self.session.state.clock.time_left_seconds, 7)

        self.session.toggle()
        self.assertTrue(self.session.state.clock.is_running)
        self.assertEqual(self.session.state.clock.phase, GamePhase.START_DELAY)
        self.assertEqual(len(self.backend.pending), 1)

    def test_settings_change_rearms_without_touching_countdown(self) -> None:
        self.session.toggle()
        self.backend.advance(12)
        self.assertEqual(self.session.state.clock.time_left_seconds, 898)

        self.session.update_settings(quarter_length=1, break_length=1)

        self.assertEqual(self.session.state.clock.time_left_seconds, 898)
        self.assertEqual(len(self.backend.pending), 1)
        self.backend.advance(898)
        self.assertEqual(self.session.state.clock.phase, GamePhase.Q1_BREAK)
        self.assertEqual(self.session.state.clock.time_left_seconds, 60)

    def test_skip_leaves_clock_paused(self) -> None:
        self.session.toggle()
        self.session.skip()
        self.assertEqual(self.session.state.clock.phase, GamePhase.Q1)
        self.assertFalse(self.session.state.clock.is_running)
        self.assertEqual(self.backend.pending, {})

    def test_sound_sequence_counts_boundaries(self) -> None:
        beeps = []
        self.session.on_sound(lambda: beeps.append(self.session.state.clock.phase))
        self.session.toggle()
        self.backend.advance(10)

        self.assertEqual(self.session.sound_seq, 1)
        self.assertEqual(len(beeps), 1)

    def test_muted_session_skips_sound_listeners(self) -> None:
        beeps = []
        self.session.on_sound(lambda: beeps.append(1))
        self.assertTrue(self.session.set_muted(True))
        self.session.toggle()
        self.backend.advance(10)

        self.assertEqual(self.session.state.clock.phase, GamePhase.Q1)
        self.assertEqual((beeps, self.session.sound_seq), ([], 0))
        self.assertTrue(self.session.snapshot()["muted"])

        self.session.set_muted(False)
        self.session.skip()
        self.session.toggle()
        self.backend.advance(120)
        self.assertEqual((beeps, self.session.sound_seq), ([1], 1))

    def test_reset_match_clears_clock_and_scores(self) -> None:
        self.session.adjust_score("home", 1)
        self.session.adjust_score("guest", 1)
        self.session.toggle()
        self.backend.advance(20)

        self.session.reset_match()

        clock = self.session.state.clock
        self.assertEqual((clock.phase, clock.time_left_seconds, clock.is_running),
                         (GamePhase.PRE_GAME, 900, False))
        self.assertEqual(self.backend.pending, {})
        self.assertEqual(self.store.load(STORAGE_KEYS["HOME_TEAM"], {})["score"], 0)
        self.assertEqual(self.store.load(STORAGE_KEYS["GUEST_TEAM"], {})["score"], 0)

    def test_close_stops_clock(self) -> None:
        self.session.toggle()
        self.session.close()
        self.assertFalse(self.session.state.clock.is_running)
        self.assertEqual(self.backend.pending, {})

    def test_change_listener_runs_on_tick(self) -> None:
        changes = []
        self.session.on_change(lambda: changes.append(self.session.state.clock.time_left_seconds))
        self.session.toggle()
        self.backend.advance(2)
        self.assertEqual(changes, [10, 9, 8])


class AutoRecordTests(MatchSessionTestCase):
    def test_end_of_match_is_recorded_once(self) -> None:
        self.session.adjust_score("home", 1)
        self._skip_to(GamePhase.END_GAME)

        self.assertEqual(len(self.session.state.history), 1)
        stat = self.session.state.history[0]
        self.assertEqual(stat.final_phase, GamePhase.END_GAME)
        self.assertEqual(stat.home_config.score, 1)

        # further activity in END_GAME does not record again
        self.session.toggle()
        self.session.tick()
        self.assertEqual(len(self.session.state.history), 1)

    def test_next_match_is_recorded_again(self) -> None:
        self._skip_to(GamePhase.END_GAME)
        self.session.skip()
        self._skip_to(GamePhase.END_GAME)
        self.assertEqual(len(self.session.state.history), 2)

    def test_countdown_into_end_game_records(self) -> None:
        self.session.update_settings(quarter_length=1)
        self._skip_to(GamePhase.Q4)
        self.session.toggle()
        self.backend.advance(60)

        self.assertEqual(self.session.state.clock.phase, GamePhase.END_GAME)
        self.assertFalse(self.session.state.clock.is_running)
        self.assertEqual(self.backend.pending, {})
        self.assertEqual(len(self.store.load(STORAGE_KEYS["GAME_HISTORY"], [])), 1)

    def test_recorded_result_is_a_snapshot(self) -> None:
        self._skip_to(GamePhase.END_GAME)
        self.session.update_team("home", name="Renamed")
        self.assertNotEqual(self.session.state.history[0].home_config.name, "Renamed")


class ScoreTests(MatchSessionTestCase):
    def test_scores_are_persisted(self) -> None:
        self.session.adjust_score("guest", 1)
        self.session.adjust_score("guest", 1)
        reloaded = self._new_session()
        self.assertEqual(reloaded.state.guest_team.score, 2)
        self.assertEqual(reloaded.state.home_team.score, 0)

    def test_swipe_below_threshold_changes_nothing(self) -> None:
        self.assertEqual(self.session.swipe_score("home", 200, 180), 0)
        self.assertEqual(self.session.swipe_score("home", 200, 120), 1)
        self.assertEqual(self.session.swipe_score("home", 100, 200), 0)

    def test_write_failure_does_not_break_scoring(self) -> None:
        with patch.object(self.store, "save", side_effect=OSError("read-only")):
            self.assertEqual(self.session.adjust_score("home", 1), 1)
        self.assertEqual(self.session.state.home_team.score, 1)


class SettingsAndTeamTests(MatchSessionTestCase):
    def test_update_settings_validates(self) -> None:
        for bad in ({"quarter_length": 0}, {"break_length": 61},
                    {"sound_type": "klaxon"}, {"overtime": 5}):
            with self.subTest(bad=bad):
                with self.assertRaises(ValueError):
                    self.session.update_settings(**bad)
        self.assertEqual(self.session.state.settings.quarter_length, 15)

    def test_update_settings_rejects_fractional_and_boolean_lengths(self) -> None:
        for bad in ({"quarter_length": 2.7}, {"quarter_length": True},
                    {"break_length": "2.5"}, {"halftime_length": None}):
            with self.subTest(bad=bad):
                with self.assertRaises(ValueError):
                    self.session.update_settings(**bad)
        self.assertEqual(self.session.state.settings.to_json()["quarter_length"], 15)

        self.session.update_settings(quarter_length=12.0)
        self.assertEqual(self.session.state.settings.quarter_length, 12)

    def test_invalid_change_leaves_other_fields_untouched(self) -> None:
        with self.assertRaises(ValueError):
            self.session.update_settings(quarter_length=10, break_length=False)
        self.assertEqual(self.session.state.settings.quarter_length, 15)

    def test_update_settings_persists(self) -> None:
        self.session.update_settings(quarter_length="12", sound_type="buzzer")
        saved = self.store.load(STORAGE_KEYS["SETTINGS"], {})
        self.assertEqual(saved["quarter_length"], 12)
        self.assertEqual(saved["sound_type"], "buzzer")
        self.assertEqual(self._new_session().state.clock.time_left_seconds, 720)

    def test_update_team_display_fields_only(self) -> None:
        team = self.session.update_team("guest", name="Owls", color="#112233")
        self.assertEqual((team.name, team.color), ("Owls", "#112233"))
        with self.assertRaises(ValueError):
            self.session.update_team("guest", score=10)
        with self.assertRaises(ValueError):
            self.session.update_team("away", name="x")
        self.assertEqual(self._new_session().state.guest_team.name, "Owls")


class ProfileAndHistoryTests(MatchSessionTestCase):
    def test_profile_roundtrip(self) -> None:
        self.session.update_settings(quarter_length=10)
        self.session.update_team("home", name="Hawks")
        profile = self.session.save_profile("  Juniors ")
        self.assertEqual(profile.profile_name, "Juniors")

        self.session.update_settings(quarter_length=20)
        self.session.update_team("home", name="Other")
        self.session.load_profile(profile.id)

        self.assertEqual(self.session.state.settings.quarter_length, 10)
        self.assertEqual(self.session.state.home_team.name, "Hawks")
        self.assertEqual(len(self._new_session().state.profiles), 1)

    def test_profile_errors(self) -> None:
        with self.assertRaises(ValueError):
            self.session.save_profile("   ")
        with self.assertRaises(KeyError):
            self.session.load_profile("missing")
        with self.assertRaises(KeyError):
            self.session.delete_profile("missing")

    def test_delete_profile(self) -> None:
        keep = self.session.save_profile("Keep")
        drop = self.session.save_profile("Drop")
        self.session.delete_profile(drop.id)
        self.assertEqual([p.id for p in self.session.state.profiles], [keep.id])

    def test_history_management(self) -> None:
        first = self.session.record_current_game()
        second = self.session.record_current_game()
        self.session.delete_game(first.id)
        self.assertEqual([g.id for g in self._new_session().state.history], [second.id])

        with self.assertRaises(KeyError):
            self.session.delete_game(first.id)

        self.session.clear_history()
        self.assertEqual(self.store.load(STORAGE_KEYS["GAME_HISTORY"], None), [])

    def test_load_skips_entries_without_id(self) -> None:
        self.store.save(STORAGE_KEYS["PROFILES"], [{"profile_name": "ghost"}])
        self.store.save(STORAGE_KEYS["GAME_HISTORY"], "garbage")
        state = load_match_state(self.store)
        self.assertEqual(state.profiles, [])
        self.assertEqual(state.history, [])


class CorruptStoreTests(unittest.TestCase):
    """Damaged records fall back to defaults instead of stopping start-up."""

    def _boot(self, key: str, value) -> MatchSession:
        store = MemoryStore({STORAGE_KEYS[key]: json.dumps(value)})
        return MatchSession(store, clock=FakeClock())

    def test_profile_with_bad_timestamp_is_kept(self) -> None:
        session = self._boot("PROFILES", [{"id": "p1", "profile_name": "A", "created_at": "yesterday"}])
        self.assertEqual(len(session.state.profiles), 1)
        self.assertEqual(session.state.profiles[0].created_at, 0)

    def test_profile_with_non_object_parts_uses_defaults(self) -> None:
        session = self._boot("PROFILES", [
            {"id": "p1", "settings": [1, 2], "home_team": "Hawks", "guest_team": 7},
        ])
        profile = session.state.profiles[0]
        self.assertEqual(profile.settings.quarter_length, 15)
        self.assertEqual(profile.home_team.name, "HOME")
        self.assertEqual(profile.guest_team.name, "GUEST")

    def test_history_with_bad_fields_uses_defaults(self) -> None:
        session = self._boot("GAME_HISTORY", [
            {"id": "g1", "timestamp": "x", "home_config": [], "guest_config": {"score": "lots"},
             "final_phase": ["Q4"]},
        ])
        stat = session.state.history[0]
        self.assertEqual(stat.timestamp, 0)
        self.assertEqual(stat.home_config.name, "HOME")
        self.assertEqual(stat.guest_config.score, 0)
        self.assertEqual(stat.final_phase, GamePhase.END_GAME)

    def test_history_entries_that_are_not_objects_are_dropped(self) -> None:
        session = self._boot("GAME_HISTORY", ["g1", 5, None, {"id": "g2"}])
        self.assertEqual([g.id for g in session.state.history], ["g2"])

    def test_damaged_settings_and_teams(self) -> None:
        session = self._boot("SETTINGS", {"quarter_length": "abc", "break_length": [3]})
        self.assertEqual(session.state.settings.quarter_length, 15)
        self.assertEqual(session.state.settings.break_length, 2)
        self.assertEqual(session.state.clock.time_left_seconds, 900)

        session = self._boot("HOME_TEAM", {"name": {"first": "x"}, "score": "ten", "logo_url": 42})
        team = session.state.home_team
        self.assertEqual((team.name, team.score, team.logo_url), ("HOME", 0, None))


class EntitlementTests(MatchSessionTestCase):
    def _expire_trial(self) -> None:
        self.clock.now += TRIAL_MS + 1

    def test_operations_blocked_after_trial(self) -> None:
        self._expire_trial()
        with self.assertRaises(ActivationRequiredError):
            self.session.toggle()
        with self.assertRaises(ActivationRequiredError):
            self.session.skip()
        with self.assertRaises(ActivationRequiredError):
            self.session.adjust_score("home", 1)
        self.assertEqual(self.session.state.clock.phase, GamePhase.PRE_GAME)
        self.assertTrue(self.session.snapshot()["entitlement"]["must_activate"])

    def test_activation_unblocks_and_persists(self) -> None:
        self._expire_trial()
        self.assertFalse(self.session.activate("0000000000000000"))

        key = expected_key(self.session.gate.device_id)
        self.assertTrue(self.session.activate(key))
        self.session.toggle()

        reloaded = self._new_session()
        self.assertTrue(reloaded.gate.state.is_activated)
        self.assertFalse(reloaded.activation_status().must_activate)

    def test_license_expiry_blocks_again(self) -> None:
        self.session.activate(expected_key(self.session.gate.device_id))
        self.clock.now += LICENSE_MS + DAY_MS
        with self.assertRaises(ActivationRequiredError):
            self.session.toggle()


if __name__ == "__main__":
    unittest.main()
