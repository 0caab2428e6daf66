import re

from jira_timeline.core.issue_keys import match_issue_keys


def test_keys_grouped_by_project():
    found = match_issue_keys("OBS-12: fix dome sync (also OBS-7, DM-3; see OBS-12 again)")
    assert found == {"OBS": {"OBS-12", "OBS-7"}, "DM": {"DM-3"}}


def test_no_keys():
    assert match_issue_keys("nothing to see here") == {}
    assert match_issue_keys(None) == {}
    # zero-prefixed numbers are not issue numbers
    assert match_issue_keys("OBS-0") == {}


def test_custom_pattern():
    pattern = re.compile(r"(SITCOM-[0-9]+)")
    assert match_issue_keys("SITCOM-5 and OBS-1", pattern) == {"SITCOM": {"SITCOM-5"}}
