"""
Data Loader Script - Seeds the tracker with student records via the API.

Reads students from a JSON file (a list of objects with name, attendance,
cgpa and assignmentCompletion) or, when no file is given, generates a
synthetic cohort. Each student is POSTed to the create endpoint so the
server computes the risk exactly as it does for form submissions.

Usage:
    python load_data.py                                   # 25 synthetic students
    python load_data.py --count 100                       # 100 synthetic students
    python load_data.py --file students.json              # Load from file
    python load_data.py --api-url http://backend:8000     # Inside Docker network
"""

import argparse
import json
import os
import random
import sys

import httpx

FIRST_NAMES = ["Aarav", "Priya", "Rohan", "Ananya", "Vikram", "Meera", "Arjun", "Kavya",
               "Ishaan", "Diya", "Kabir", "Sara", "Aditya", "Neha", "Rahul", "Pooja"]
LAST_NAMES = ["Sharma", "Patel", "Iyer", "Reddy", "Khan", "Singh", "Nair", "Das", "Gupta", "Menon"]


def generate_students(count, seed=42):
    """Synthetic cohort with a realistic mix of strong and struggling students."""
    rng = random.Random(seed)
    students = []
    for _ in range(count):
        engagement = rng.random()
        students.append({
            "name": "{} {}".format(rng.choice(FIRST_NAMES), rng.choice(LAST_NAMES)),
            "attendance": int(min(100, max(0, rng.gauss(45 + 50 * engagement, 10)))),
            "cgpa": round(min(10.0, max(0.0, rng.gauss(4 + 5.5 * engagement, 1.2))), 2),
            "assignmentCompletion": int(min(100, max(0, rng.gauss(40 + 55 * engagement, 12)))),
        })
    return students


def main():
    parser = argparse.ArgumentParser(description="Seed the dropout tracker with student records")
    parser.add_argument("--api-url", default=os.getenv("API_URL", "http://localhost:8000"))
    parser.add_argument("--file", help="JSON file with a list of students")
    parser.add_argument("--count", type=int, default=25, help="Synthetic students to generate")
    args = parser.parse_args()

    create_url = "{}/api/students".format(args.api_url.rstrip("/"))

    if args.file:
        if not os.path.exists(args.file):
            print("Error: Could not find {}".format(args.file))
            sys.exit(1)
        with open(args.file, "r") as f:
            students = json.load(f)
        print("Loaded {} students from {}".format(len(students), args.file))
    else:
        students = generate_students(args.count)
        print("Generated {} synthetic students".format(len(students)))

    print("Sending to: {}".format(create_url))
    print()

    created = 0
    rejected = 0
    tiers = {"High": 0, "Medium": 0, "Low": 0}

    with httpx.Client(timeout=30.0) as client:
        for student in students:
            resp = client.post(create_url, json=student)
            if resp.status_code == 201:
                record = resp.json()["data"]
                created += 1
                tiers[record["riskLevel"]] += 1
                print("  {:<24} {:>3}%  {}".format(record["name"], record["dropoutProbability"], record["riskLevel"]))
            elif resp.status_code == 422:
                rejected += 1
                print("  {:<24} rejected: {}".format(str(student.get("name")), resp.text))
            else:
                resp.raise_for_status()

    print()
    print("=" * 60)
    print("SEED SUMMARY")
    print("=" * 60)
    print("  Created:      {}".format(created))
    print("  Rejected:     {}".format(rejected))
    print("  High Risk:    {}".format(tiers["High"]))
    print("  Medium Risk:  {}".format(tiers["Medium"]))
    print("  Low Risk:     {}".format(tiers["Low"]))
    print("=" * 60)


if __name__ == "__main__":
    main()
