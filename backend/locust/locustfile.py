"""
Locust Load Test Suite

Run scenarios:
  locust -f locustfile.py --tags contention   # Many users, one slot
  locust -f locustfile.py --tags throughput   # Machine list cache
  locust -f locustfile.py --tags edge         # Bad input
  locust -f locustfile.py                     # All tests

The contention scenario certifies each simulated user through the admin
account, so ADMIN_EMAIL / ADMIN_PASSWORD must match the server's seed.
"""

import os
import random
from datetime import date, timedelta

from locust import HttpUser, task, between, tag, events

API = "/api"
ADMIN_EMAIL = os.environ.get("ADMIN_EMAIL", "admin@learnit.dev")
ADMIN_PASSWORD = os.environ.get("ADMIN_PASSWORD", "change-me-admin")

TIME_SLOTS = [
    "9:00 AM", "10:00 AM", "11:00 AM", "12:00 PM",
    "1:00 PM", "2:00 PM", "3:00 PM", "4:00 PM",
]

CONTENTION_MACHINE_ID = "1"
CONTENTION_DATE = (date.today() + timedelta(days=30)).isoformat()
CONTENTION_SLOT = "9:00 AM"

_admin_headers = {}


def random_email():
    return f"load_{random.randint(100000, 999999)}@test.com"


def register_and_login(client):
    email = random_email()
    client.post(f"{API}/auth/register", json={
        "name": "Load User",
        "email": email,
        "password": "test123",
    })
    resp = client.post(f"{API}/auth/login", json={"email": email, "password": "test123"})
    if resp.status_code != 200:
        return None, {}
    body = resp.json()
    return body["user"]["id"], {"Authorization": f"Bearer {body['access_token']}"}


def admin_headers(client):
    if not _admin_headers:
        resp = client.post(f"{API}/auth/login", json={
            "email": ADMIN_EMAIL,
            "password": ADMIN_PASSWORD,
        })
        if resp.status_code == 200:
            _admin_headers["Authorization"] = f"Bearer {resp.json()['access_token']}"
    return _admin_headers


@events.test_start.add_listener
def on_test_start(environment, **kwargs):
    print("\n" + "=" * 60)
    print(f"Contention target: machine {CONTENTION_MACHINE_ID} "
          f"on {CONTENTION_DATE} at {CONTENTION_SLOT}")
    print("=" * 60)


class SlotContentionUser(HttpUser):
    """
    TEST 1: Contention - N certified users -> 1 slot

    Run: locust -f locustfile.py --tags contention -u 100 -r 50 --run-time 30s

    After test, verify:
      SELECT COUNT(*) FROM bookings
      WHERE machine_id = '1' AND date = '<CONTENTION_DATE>'
        AND time_slot = '9:00 AM' AND status IN ('Pending', 'Approved');
    Must be exactly 1
    """
    wait_time = between(0, 0.1)

    def on_start(self):
        user_id, self.headers = register_and_login(self.client)
        if user_id is None:
            return
        admin = admin_headers(self.client)
        for machine_id in ("5", CONTENTION_MACHINE_ID):
            self.client.post(
                f"{API}/certifications",
                json={"user_id": user_id, "machine_id": machine_id},
                headers=admin,
                name=f"{API}/certifications [setup]",
            )

    @tag("contention")
    @task
    def book_contended_slot(self):
        if not self.headers:
            return

        with self.client.post(f"{API}/bookings",
            json={
                "machine_id": CONTENTION_MACHINE_ID,
                "date": CONTENTION_DATE,
                "time_slot": CONTENTION_SLOT,
            },
            headers=self.headers,
            catch_response=True
        ) as resp:
            if resp.status_code in (201, 409):
                resp.success()
            else:
                resp.failure(f"Unexpected: {resp.status_code}")


class ThroughputUser(HttpUser):
    """
    TEST 2: Throughput - Cache effectiveness

    Run twice:
      1. With Redis: locust -f locustfile.py --tags throughput -u 100 -r 20 --run-time 60s
      2. With REDIS_ENABLED=false on the server, run again
    """
    wait_time = between(0.1, 0.5)

    @tag("throughput", "read")
    @task(10)
    def list_machines_cached(self):
        self.client.get(f"{API}/machines", name=f"{API}/machines [cached]")

    @tag("throughput", "read")
    @task(5)
    def availability(self):
        day = (date.today() + timedelta(days=random.randint(1, 14))).isoformat()
        machine_id = random.choice(["1", "2", "3", "4"])
        self.client.get(
            f"{API}/machines/{machine_id}/availability?date={day}",
            name=f"{API}/machines/{{id}}/availability",
        )

    @tag("throughput")
    @task(2)
    def status_feed(self):
        self.client.get(f"{API}/machines/status/changes?since=0", name=f"{API}/machines/status/changes")

    @tag("throughput")
    @task(1)
    def health_check(self):
        self.client.get("/health")


class EdgeCaseUser(HttpUser):
    """
    TEST 3: Edge cases - Bad input handling

    Run: locust -f locustfile.py --tags edge -u 20 -r 5 --run-time 30s
    """
    wait_time = between(0.5, 1.5)

    def on_start(self):
        _, self.headers = register_and_login(self.client)

    def _expect(self, resp, codes):
        if resp.status_code in codes:
            resp.success()
        else:
            resp.failure(f"Expected {codes}, got {resp.status_code}")

    @tag("edge")
    @task
    def unknown_machine(self):
        day = (date.today() + timedelta(days=1)).isoformat()
        with self.client.post(f"{API}/bookings",
            json={"machine_id": "999999", "date": day, "time_slot": "9:00 AM"},
            headers=self.headers,
            catch_response=True
        ) as resp:
            self._expect(resp, (404,))

    @tag("edge")
    @task
    def unknown_slot(self):
        day = (date.today() + timedelta(days=1)).isoformat()
        with self.client.post(f"{API}/bookings",
            json={"machine_id": "1", "date": day, "time_slot": "8:00 PM"},
            headers=self.headers,
            catch_response=True
        ) as resp:
            self._expect(resp, (422,))

    @tag("edge")
    @task
    def past_date(self):
        with self.client.post(f"{API}/bookings",
            json={"machine_id": "1", "date": "2020-01-01", "time_slot": "9:00 AM"},
            headers=self.headers,
            catch_response=True
        ) as resp:
            self._expect(resp, (400,))

    @tag("edge")
    @task
    def uncertified(self):
        day = (date.today() + timedelta(days=2)).isoformat()
        with self.client.post(f"{API}/bookings",
            json={"machine_id": "3", "date": day, "time_slot": random.choice(TIME_SLOTS)},
            headers=self.headers,
            catch_response=True
        ) as resp:
            self._expect(resp, (403,))

    @tag("edge")
    @task
    def malformed_json(self):
        with self.client.post(f"{API}/bookings",
            data="not json at all",
            headers=self.headers,
            catch_response=True
        ) as resp:
            self._expect(resp, (400, 422))

    @tag("edge")
    @task
    def missing_auth(self):
        with self.client.post(f"{API}/bookings",
            json={"machine_id": "1", "date": CONTENTION_DATE, "time_slot": "9:00 AM"},
            catch_response=True
        ) as resp:
            self._expect(resp, (401,))


class RealisticUser(HttpUser):
    """
    TEST 4: Realistic mixed workload

    Run: locust -f locustfile.py -u 200 -r 20 --run-time 120s

    Mostly browsing the catalogue and eligibility, some quiz attempts,
    occasional booking attempts (which fail 403 until certified).
    """
    wait_time = between(1, 3)

    def on_start(self):
        _, self.headers = register_and_login(self.client)

    @task(40)
    def browse_machines(self):
        self.client.get(f"{API}/machines")

    @task(20)
    def eligibility(self):
        if self.headers:
            self.client.get(f"{API}/machines/eligibility", headers=self.headers)

    @task(10)
    def read_course(self):
        self.client.get(f"{API}/courses/{random.randint(1, 6)}", name=f"{API}/courses/{{id}}")

    @task(5)
    def attempt_quiz(self):
        if not self.headers:
            return
        quiz_id = str(random.randint(1, 6))
        resp = self.client.get(f"{API}/quizzes/{quiz_id}", name=f"{API}/quizzes/{{id}}")
        if resp.status_code != 200:
            return
        answers = [random.randrange(len(q["options"])) for q in resp.json()["questions"]]
        with self.client.post(
            f"{API}/quizzes/{quiz_id}/submit",
            json={"answers": answers},
            headers=self.headers,
            name=f"{API}/quizzes/{{id}}/submit",
            catch_response=True,
        ) as r:
            # 403 until the safety and course steps for that machine are done
            if r.status_code in (200, 403):
                r.success()
            else:
                r.failure(f"Unexpected status {r.status_code}")

    @task(3)
    def try_booking(self):
        if not self.headers:
            return
        day = (date.today() + timedelta(days=random.randint(1, 30))).isoformat()
        with self.client.post(f"{API}/bookings",
            json={
                "machine_id": random.choice(["1", "2", "3", "4"]),
                "date": day,
                "time_slot": random.choice(TIME_SLOTS),
            },
            headers=self.headers,
            catch_response=True
        ) as resp:
            if resp.status_code in (201, 403, 409):
                resp.success()
