#!/usr/bin/env python3
"""
Front-desk API smoke test.

Runs against a live server (``python manage.py runserver``): registers a
patient with a synthetic fingerprint identifier, scans it back, scans an
unknown identifier, lists and fetches the record, and reports every
endpoint call.
"""
import os
import secrets
import sys
import time
from dataclasses import dataclass
from typing import Dict, Optional

import requests

BASE_URL = os.getenv("FRONTDESK_API_URL", "http://127.0.0.1:8000").rstrip("/")


@dataclass
class SmokeResult:
    success: bool
    endpoint: str
    method: str
    status_code: int
    response_time: float
    error_message: str = ""
    description: str = ""


class FrontDeskSmokeTest:
    def __init__(self):
        self.session = requests.Session()
        self.results = []
        self.errors = []

    def call(self, method: str, endpoint: str, *, json: Optional[Dict] = None, data: Optional[Dict] = None,
             expected_status: int = 200, description: str = "") -> Optional[requests.Response]:
        url = f"{BASE_URL}{endpoint}"
        start_time = time.time()
        response = None
        try:
            response = self.session.request(method, url, json=json, data=data, timeout=15)
            response_time = time.time() - start_time
            ok = response.status_code == expected_status
            result = SmokeResult(
                success=ok,
                endpoint=endpoint,
                method=method,
                status_code=response.status_code,
                response_time=response_time,
                error_message="" if ok else response.text[:200],
                description=description,
            )
            mark = "✅" if ok else "❌"
            print(f"{mark} {method} {endpoint} - {response.status_code} ({response_time:.2f}s) {description}")
        except requests.RequestException as e:
            response_time = time.time() - start_time
            result = SmokeResult(
                success=False,
                endpoint=endpoint,
                method=method,
                status_code=0,
                response_time=response_time,
                error_message=str(e),
                description=description,
            )
            print(f"❌ {method} {endpoint} - error: {e} ({response_time:.2f}s)")
        self.results.append(result)
        if not result.success:
            self.errors.append(result)
        return response

    def run(self) -> bool:
        print("🏥 Clinic front-desk API smoke test")
        print("=" * 50)
        identifier = "smoke-" + secrets.token_urlsafe(24)

        self.call("GET", "/healthz", description="health check")
        created = self.call("POST", "/api/patients", data={
            "name": "Smoke Test",
            "age": "42",
            "gender": "Other",
            "bloodGroup": "O+",
            "fingerprintData": identifier,
        }, expected_status=201, description="register patient")
        self.call("POST", "/api/patients", data={
            "name": "X",
            "age": "0",
            "gender": "Other",
            "bloodGroup": "O+",
            "fingerprintData": identifier,
        }, expected_status=400, description="invalid registration is rejected")
        self.call("POST", "/api/patients/scan", json={"fingerprintData": identifier},
                  description="scan registered fingerprint")
        self.call("POST", "/api/patients/scan", json={"fingerprintData": identifier + "-unknown"},
                  expected_status=404, description="scan unknown fingerprint")
        self.call("GET", "/api/patients", description="list patients")

        patient_id = None
        if created is not None and created.status_code == 201:
            patient_id = created.json().get("patient", {}).get("id")
        if patient_id is not None:
            self.call("GET", f"/api/patients/{patient_id}", description="patient detail")
        self.call("GET", "/api/patients/999999999", expected_status=404, description="missing patient")

        self.report()
        return not self.errors

    def report(self):
        total = len(self.results)
        passed = sum(1 for r in self.results if r.success)
        print(f"\n🎯 Summary: {passed}/{total} calls as expected")
        for i, error in enumerate(self.errors, 1):
            print(f"{i}. {error.method} {error.endpoint} [{error.status_code}] {error.description}")
            print(f"   {error.error_message}")


def main():
    ok = FrontDeskSmokeTest().run()
    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    main()
