#!/usr/bin/env python3
"""
Selector Probe Report

Logs in to OpenMRS, opens a patient dashboard and reports which probe of
each configured field resolved. A field answered by a late probe, or by no
probe at all, points at markup drift the selector YAML should catch up with.

Usage:
    python tools/probe_report.py --url http://localhost:8080/openmrs/ --patient John
"""

import argparse
import json
import logging
from dataclasses import replace
from typing import Any, Dict, List

from selenium import webdriver
from selenium.webdriver.firefox.options import Options

from ui_engine.engine import UIEngine
from ui_engine.extractor import FieldProbe
from ui_engine.pages import Credentials, HomePage, LoginPage
from ui_engine.settings import OpenmrsEnvironment

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def probe_fields(engine: UIEngine, fields: Dict[str, FieldProbe]) -> List[Dict[str, Any]]:
    """Evaluate every field and describe the probe that answered it."""
    rows = []
    for field in fields.values():
        hit = engine.extractor.probe_field(field)
        rows.append({
            "field": field.name,
            "value": hit.value,
            "probe_index": hit.probe_index,
            "probe_count": len(field.probes),
            "locator": field.probes[hit.probe_index].locator.describe() if hit.found else None,
        })
        if not hit.found:
            logger.warning("%s: no probe resolved", field.name)
        elif hit.probe_index > 0:
            logger.warning("%s: answered by fallback probe %d of %d",
                           field.name, hit.probe_index, len(field.probes))
    return rows


def run_report(engine: UIEngine, environment: OpenmrsEnvironment, patient_query: str,
               location: str) -> Dict[str, Any]:
    login_page = LoginPage(engine, environment)
    if not login_page.goto():
        raise RuntimeError(f"Login page not displayed at {environment.base_url}")
    result = login_page.login(Credentials(environment.username, environment.password), location)
    if not result.success:
        raise RuntimeError(f"Login failed: {result.error}")
    logger.info("Logged in at %s (shape %s, reference list: %s)", result.session.location,
                result.selection.shape.value, result.selection.via_fallback)

    config = engine.config
    report: Dict[str, Any] = {
        "base_url": environment.base_url,
        "location_shape": result.selection.shape.value,
        "location_via_fallback": result.selection.via_fallback,
        "home": probe_fields(engine, {"welcome": config.field_probe("home.welcome")}),
    }

    search_page = HomePage(engine, environment).go_to_find_patient()
    selection = search_page.search_and_select(patient_query)
    report["search"] = selection.message
    if selection.detail is None:
        logger.warning("No patient matched %r, skipping dashboard probes", patient_query)
        return report
    report["patient_detail"] = probe_fields(engine, config.field_probes("patient_detail.fields"))
    return report


def main():
    parser = argparse.ArgumentParser(
        description="Report which selector probe answers each OpenMRS field"
    )
    parser.add_argument("--url", help="OpenMRS base URL (default: $BASE_URL)")
    parser.add_argument("--patient", default="John", help="Search query for the patient to open")
    parser.add_argument("--location", default="random", help="Login location")
    parser.add_argument("--version", help="Selector YAML version (default: $OPENMRS_UI_VERSION)")
    parser.add_argument("--output-json", default="probe_report.json", help="Output JSON file")
    parser.add_argument("--headless", action="store_true", help="Run in headless mode")
    args = parser.parse_args()

    environment = OpenmrsEnvironment.from_env()
    version = args.version or environment.ui_version

    options = Options()
    if args.headless:
        options.add_argument("--headless")
    driver = webdriver.Firefox(options=options)
    try:
        engine = UIEngine.for_selenium(driver, version=version)
        if args.url:
            environment = replace(environment, base_url=args.url)
        report = run_report(engine, environment, args.patient, args.location)
    finally:
        driver.quit()

    with open(args.output_json, "w") as f:
        json.dump(report, f, indent=2)

    logger.info("=" * 60)
    logger.info("SUMMARY")
    logger.info("=" * 60)
    for section in ("home", "patient_detail"):
        for row in report.get(section, []):
            logger.info("  - %s: probe %s/%d -> %r", row["field"], row["probe_index"],
                        row["probe_count"], row["value"])
    logger.info("Report saved to %s", args.output_json)


if __name__ == "__main__":
    main()
