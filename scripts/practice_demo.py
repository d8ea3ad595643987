"""Play a practice session against a running server, answering from the terminal."""
import sys

import httpx

BASE = "http://localhost:8000/api/v1/practice"


def show_question(q):
    print(f"\n[{q['tier']}] {q['text']}  ({q['points']} pts, {q['source']})")
    if q.get("code_example"):
        print()
        for line in q["code_example"].splitlines():
            print(f"    {line}")
        print()
    for i, opt in enumerate(q["options"]):
        print(f"  {i}. {opt}")


def ask(n_options):
    while True:
        raw = input("Answer (number, s=skip, q=quit): ").strip().lower()
        if raw in ("s", "q"):
            return raw
        if raw.isdigit() and int(raw) < n_options:
            return int(raw)
        print("  ?")


def main():
    subject = sys.argv[1] if len(sys.argv) > 1 else "cpp"
    c = httpx.Client(timeout=60)

    r = c.get(f"{BASE}/subjects")
    if r.status_code != 200:
        print(f"Server not reachable: {r.status_code}")
        sys.exit(1)
    available = [s["subject"] for s in r.json()["subjects"]]
    print(f"Subjects: {', '.join(available)}")

    r = c.post(f"{BASE}/sessions", json={"subject": subject})
    if r.status_code != 201:
        print(f"Start failed: {r.status_code} {r.text[:300]}")
        sys.exit(1)
    view = r.json()
    sid = view["session_id"]
    print(f"Session {sid} ({subject}), summary after {view['completion_checkpoint']} questions")

    while True:
        q = view["question"]
        show_question(q)
        choice = ask(len(q["options"]))
        if choice == "q":
            c.delete(f"{BASE}/sessions/{sid}")
            print("Session abandoned.")
            return
        if choice == "s":
            r = c.post(f"{BASE}/sessions/{sid}/skip")
        else:
            r = c.post(f"{BASE}/sessions/{sid}/answer", json={"selected_index": choice})
        ev = r.json()
        e = ev["evaluation"]
        print(f"  {e['feedback']}")
        print(f"  +{e['earned_points']} pts ({e['rating']}) | "
              f"{ev['statistics']['correct_answers']}/{ev['statistics']['total_questions']} correct")
        if ev["tier_changed"]:
            print(f"  Tier is now {ev['new_tier']}")

        if ev["completed"]:
            sm = ev["summary"]
            print(f"\nSession complete: {sm['correct_answers']}/{sm['total_questions']} correct, "
                  f"{sm['total_points']} pts, {sm['accuracy']}% accuracy, "
                  f"avg {sm['average_time_ms'] / 1000:.1f}s, final tier {sm['final_tier']}")
            if input("Keep practising? [y/N] ").strip().lower() != "y":
                c.delete(f"{BASE}/sessions/{sid}")
                return
            r = c.post(f"{BASE}/sessions/{sid}/continue")
        else:
            r = c.post(f"{BASE}/sessions/{sid}/next")
        view = r.json()


if __name__ == "__main__":
    main()
