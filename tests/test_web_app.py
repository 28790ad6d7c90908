import unittest

from courtclock.services import MatchSession, MemoryStore, expected_key
from courtclock.ui.web_app import create_app
from courtclock.utils.constants import TRIAL_MS

from fakes import FakeClock


class WebAppTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.clock = FakeClock()
        self.session = MatchSession(MemoryStore(), clock=self.clock)
        self.app = create_app(session=self.session)
        self.app.config["TESTING"] = True
        self.client = self.app.test_client()


class StateAndClockTests(WebAppTestCase):
    def test_index_page_served(self) -> None:
        response = self.client.get("/")
        self.assertEqual(response.status_code, 200)
        self.assertIn(b"<html", response.data.lower())

    def test_state_snapshot(self) -> None:
        data = self.client.get("/api/state").get_json()
        self.assertTrue(data["success"])
        self.assertEqual(data["clock"]["phase"], "PRE_GAME")
        self.assertEqual(data["clock"]["display"], "15:00")
        self.assertEqual(data["home_team"]["score"], 0)
        self.assertFalse(data["entitlement"]["must_activate"])

    def test_toggle_and_skip(self) -> None:
        data = self.client.post("/api/clock/toggle").get_json()
        self.assertEqual(data["clock"]["phase"], "START_DELAY")
        self.assertEqual(data["clock"]["time_left_seconds"], 10)
        self.assertTrue(data["clock"]["is_running"])

        data = self.client.post("/api/clock/skip").get_json()
        self.assertEqual(data["clock"]["phase"], "Q1")
        self.assertFalse(data["clock"]["is_running"])

    def test_reset(self) -> None:
        self.client.post("/api/score", json={"side": "home", "delta": 1})
        self.client.post("/api/clock/skip")
        response = self.client.post("/api/clock/reset")
        self.assertEqual(response.status_code, 200)
        state = self.client.get("/api/state").get_json()
        self.assertEqual(state["clock"]["phase"], "PRE_GAME")
        self.assertEqual(state["home_team"]["score"], 0)


class ScoreTests(WebAppTestCase):
    def test_adjust_score(self) -> None:
        data = self.client.post("/api/score", json={"side": "guest", "delta": 1}).get_json()
        self.assertEqual(data, {"success": True, "side": "guest", "score": 1})

    def test_adjust_score_rejects_bad_input(self) -> None:
        for payload in ({"side": "away", "delta": 1}, {"side": "home", "delta": 3},
                        {"side": "home", "delta": "x"}):
            with self.subTest(payload=payload):
                response = self.client.post("/api/score", json=payload)
                self.assertEqual(response.status_code, 400)
                self.assertFalse(response.get_json()["success"])

    def test_swipe(self) -> None:
        data = self.client.post(
            "/api/score/swipe", json={"side": "home", "start_y": 300, "end_y": 200}
        ).get_json()
        self.assertEqual(data["score"], 1)

        response = self.client.post("/api/score/swipe", json={"side": "home", "start_y": 300})
        self.assertEqual(response.status_code, 400)


class SettingsTests(WebAppTestCase):
    def test_mute(self) -> None:
        data = self.client.post("/api/sound/mute", json={"muted": True}).get_json()
        self.assertEqual(data, {"success": True, "muted": True})
        self.assertTrue(self.client.get("/api/state").get_json()["muted"])
        self.assertEqual(self.client.post("/api/sound/mute", json={"muted": "yes"}).status_code, 400)

    def test_fractional_length_rejected(self) -> None:
        response = self.client.post("/api/settings", json={"quarter_length": 2.7})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(self.session.state.settings.quarter_length, 15)

    def test_get_and_update_settings(self) -> None:
        self.assertEqual(self.client.get("/api/settings").get_json()["settings"]["quarter_length"], 15)

        data = self.client.post("/api/settings", json={"quarter_length": 10}).get_json()
        self.assertEqual(data["settings"]["quarter_length"], 10)

        response = self.client.post("/api/settings", json={"quarter_length": 0})
        self.assertEqual(response.status_code, 400)

    def test_update_team(self) -> None:
        data = self.client.post("/api/teams/home", json={"name": "Hawks"}).get_json()
        self.assertEqual(data["team"]["name"], "Hawks")
        self.assertEqual(self.client.post("/api/teams/away", json={"name": "x"}).status_code, 400)


class ProfileAndHistoryTests(WebAppTestCase):
    def test_profile_lifecycle(self) -> None:
        profile = self.client.post("/api/profiles", json={"profile_name": "Seniors"}).get_json()["profile"]
        listed = self.client.get("/api/profiles").get_json()["profiles"]
        self.assertEqual([p["id"] for p in listed], [profile["id"]])

        self.assertEqual(self.client.post(f"/api/profiles/{profile['id']}/load").status_code, 200)
        self.assertEqual(self.client.delete(f"/api/profiles/{profile['id']}").status_code, 200)
        self.assertEqual(self.client.delete(f"/api/profiles/{profile['id']}").status_code, 404)
        self.assertEqual(self.client.post("/api/profiles/nope/load").status_code, 404)
        self.assertEqual(self.client.post("/api/profiles", json={}).status_code, 400)

    def test_history_newest_first(self) -> None:
        self.clock.now += 1000
        first = self.client.post("/api/history").get_json()["game"]
        self.clock.now += 1000
        second = self.client.post("/api/history").get_json()["game"]

        history = self.client.get("/api/history").get_json()["history"]
        self.assertEqual([g["id"] for g in history], [second["id"], first["id"]])

        self.assertEqual(self.client.delete(f"/api/history/{first['id']}").status_code, 200)
        self.assertEqual(self.client.delete(f"/api/history/{first['id']}").status_code, 404)
        self.client.delete("/api/history")
        self.assertEqual(self.client.get("/api/history").get_json()["history"], [])


class ActivationTests(WebAppTestCase):
    def test_gated_endpoints_return_403(self) -> None:
        self.clock.now += TRIAL_MS + 1
        response = self.client.post("/api/clock/toggle")
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.get_json()["device_id"], self.session.gate.device_id)
        self.assertEqual(self.client.post("/api/score", json={"side": "home", "delta": 1}).status_code, 403)

        status = self.client.get("/api/activation").get_json()
        self.assertTrue(status["must_activate"])
        self.assertTrue(status["trial_expired"])

    def test_activation(self) -> None:
        self.clock.now += TRIAL_MS + 1
        response = self.client.post("/api/activation", json={"key": "1234 5678"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json()["key"], "1234 5678")

        key = expected_key(self.session.gate.device_id)
        spaced = " ".join(key[i:i + 4] for i in range(0, 16, 4))
        data = self.client.post("/api/activation", json={"key": spaced}).get_json()
        self.assertTrue(data["success"])
        self.assertTrue(data["is_activated"])
        self.assertEqual(self.client.post("/api/clock/toggle").status_code, 200)


if __name__ == "__main__":
    unittest.main()
