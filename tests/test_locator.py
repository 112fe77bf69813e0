import pytest

from anchortab_lib.locator import LocatorTolerances, RegionLocator
from anchortab_lib.models import PageRect
from anchortab_lib.schema import build_descriptor


def section(**fields):
    return build_descriptor({"s": fields}).children[0]


@pytest.fixture
def statement(make_document):
    return make_document(
        [
            [("Intro", 72, 40)],
            [("Header", 72, 30), ("Balance Sheet", 72, 100)],
            [("Header", 72, 30), ("Cash 10", 72, 60)],
            [("Header", 72, 30), ("Notes", 72, 300)],
            [("Header", 72, 30)],
        ]
    )


def test_single_page_region(make_document):
    doc = make_document(
        [[("Balance Sheet", 72, 100), ("Total", 72, 120), ("Notes", 72, 200)]]
    )
    region = RegionLocator().locate(section(top="Balance Sheet|false", bottom="Notes"), 1, doc)
    assert region.rects == [PageRect(1, 0.0, 110.0, 612.0, 199.0)]
    assert not region.truncated


def test_bottom_is_only_searched_below_the_top(make_document):
    doc = make_document(
        [[("Notes", 72, 50), ("Balance Sheet", 72, 100), ("Total", 72, 120), ("Notes", 72, 200)]]
    )
    region = RegionLocator().locate(section(top="Balance Sheet|false", bottom="Notes"), 1, doc)
    assert region[0].top == 110.0
    assert region[0].bottom == 199.0


def test_left_and_right_edges(make_document):
    doc = make_document(
        [[("Label", 72, 100), ("Amount", 300, 100), ("Due", 450, 100), ("Footer", 72, 400)]]
    )
    region = RegionLocator().locate(
        section(top="Label", bottom="Footer", left="Amount|false", right="Due"), 1, doc
    )
    # excluded left starts after the anchor, excluded right stops before it
    assert region.rects == [PageRect(1, 336.0, 100.0, 450.0, 399.0)]


def test_bottom_only_section_starts_at_page_top(make_document):
    doc = make_document([[("Title", 72, 20), ("Notes", 72, 200)]])
    region = RegionLocator().locate(section(bottom="Notes"), 1, doc)
    assert region.rects == [PageRect(1, 0.0, 0.0, 612.0, 199.0)]


def test_multi_page_region(statement):
    region = RegionLocator().locate(
        section(top="Balance Sheet", bottom="Notes", bottom_margin=20), 1, statement
    )
    # working top margin: floor(mean(50, 40, 40, 40, 40)) = 42
    assert region.rects == [
        PageRect(2, 0.0, 100.0, 612.0, 772.0),
        PageRect(3, 0.0, 42.0, 612.0, 772.0),
        PageRect(4, 0.0, 42.0, 612.0, 289.0),
    ]
    assert region.last_page == 4


def test_configured_top_margin_wins_when_larger(statement):
    region = RegionLocator().locate(
        section(top="Balance Sheet", bottom="Notes", top_margin=80), 1, statement
    )
    assert [r.top for r in region] == [100.0, 80.0, 80.0]


def test_measured_top_margin_wins_when_larger(statement):
    region = RegionLocator().locate(
        section(top="Balance Sheet", bottom="Notes", top_margin=10), 1, statement
    )
    assert [r.top for r in region] == [100.0, 42.0, 42.0]


def test_included_bottom_has_no_inset(statement):
    region = RegionLocator().locate(section(top="Balance Sheet", bottom="Notes|true"), 1, statement)
    assert region[-1].bottom == 310.0


def test_custom_tolerances(statement):
    locator = RegionLocator(LocatorTolerances(bottom_detach=0.0, last_page_inset=0.0))
    region = locator.locate(section(top="Balance Sheet", bottom="Notes"), 1, statement)
    assert region[-1].bottom == 300.0


def test_top_never_found_gives_empty_region(statement):
    region = RegionLocator().locate(section(top="Income Statement", bottom="Notes"), 1, statement)
    assert not region
    assert region.rects == []


def test_search_starts_at_the_given_page(statement):
    region = RegionLocator().locate(section(top="Balance Sheet", bottom="Notes"), 3, statement)
    assert not region


def test_region_running_past_the_end_is_truncated(statement):
    region = RegionLocator().locate(section(top="Balance Sheet", bottom="Signatures"), 1, statement)
    assert region.truncated
    assert [r.page for r in region] == [2, 3, 4, 5]


def test_start_page_beyond_document(statement):
    assert not RegionLocator().locate(section(top="Header"), 9, statement)


def test_bottom_stops_at_first_run_matching_any_alternative(make_document):
    doc = make_document([[("Assets", 72, 100), ("Remarks", 72, 150), ("Notes", 72, 250)]])
    region = RegionLocator().locate(section(top="Assets", bottom="Notes|Remarks"), 1, doc)
    assert region[0].bottom == 149.0
