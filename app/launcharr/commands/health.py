# app/launcharr/commands/health.py
from __future__ import annotations

from typing import List

from launcharr.commands.base import Command
from launcharr.core.models import HealthCheck, Query
from launcharr.core.results import Result, run_action


class HealthCommand(Command):
    flag = "-s"
    name = "System Health"
    description = "Monitor Sonarr system health, view issues, and trigger health check re-tests"

    def run(self, query: Query) -> List[Result]:
        results = [Result(
            title="🔄 Test All Health Checks",
            subtitle="Trigger a complete health check re-test for all systems",
            icon="refresh.png",
            score=100,
            action=run_action("check health", self.client.trigger_health_check),
        )]

        checks = self.client.get_health_checks()
        if not checks:
            results.append(Result(
                title="✅ All Systems Healthy",
                subtitle="No health check issues found - All systems operating normally",
                score=95,
            ))
        else:
            count = len(checks)
            results.append(Result(
                title=f"⚠️ Found {count} Health Issue{'' if count == 1 else 's'}",
                subtitle="Select any issue to re-test it",
                score=90,
            ))
            for check in sorted(checks, key=lambda c: c.severity):
                results.append(self._check_result(check))

        results.append(Result(
            title="🌐 Open System Status",
            subtitle="View System → Status in Sonarr",
            score=10,
            action=run_action("open status", self.client.open_system_status),
        ))
        return results

    def _check_result(self, check: HealthCheck) -> Result:
        return Result(
            title=check.display_title,
            subtitle=check.display_subtitle,
            score=85 if check.type.lower() == "error" else 80,
            action=run_action(f"retest {check.source}",
                              lambda c=check: self.client.retest_health_check(c)),
            context=check,
        )
