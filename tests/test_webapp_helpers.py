# tests/test_webapp_helpers.py
from __future__ import annotations

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from hr_onboarding.api_client import MasterOption
from hr_onboarding.schema import AppSchema
from hr_onboarding.webapp import _select_options, _with_current_value


def test_master_fields_take_options_from_lookups() -> None:
    lookups = {'companies': [MasterOption(1, 'Acme India'), MasterOption(2, 'Acme Labs')]}
    assert _select_options(AppSchema.JobDetails.COMPANY, lookups) == {1: 'Acme India', 2: 'Acme Labs'}
    assert _select_options(AppSchema.JobDetails.SHIFT, lookups) == {}, "Lookup not loaded yet"

def test_static_fields_keep_their_options() -> None:
    assert _select_options(AppSchema.Personal.GENDER, {}) == {'m': "Male", 'f': "Female", 'o': "Other"}

def test_stored_value_stays_selectable() -> None:
    # A revisited step may hold an id whose lookup failed to load
    assert _with_current_value({}, 7) == {7: '7'}
    assert _with_current_value({1: 'Admin'}, [1, 4]) == {1: 'Admin', 4: '4'}
    assert _with_current_value(['Goa'], 'Goa') == ['Goa']
    assert _with_current_value({}, None) == {}
