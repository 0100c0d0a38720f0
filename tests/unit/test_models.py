"""
Unit Tests for payload records
"""
import pytest

from civicportal.models import (
    AccountStatus,
    Announcement,
    Department,
    Issue,
    IssueType,
    Language,
    Leader,
    LeaderSearchResult,
    Location,
    Page,
    Topic,
    UserProfile,
)

from tests.unit.helpers import user_payload


class TestUserProfile:
    """Test citizen profile mapping"""

    def test_from_auth_user(self):
        """Test names and location are mapped"""
        profile = UserProfile.from_auth_user(user_payload(firstName="Aline", lastName="Uwase"))
        assert profile.name == "Aline Uwase"
        assert profile.location.district == "Gasabo"
        assert profile.is_profile_complete()

    def test_incomplete_without_village(self):
        """Test every location level is needed"""
        user = user_payload(location={"district": "Gasabo", "sector": "Kimironko", "cell": "Bibare"})
        assert not UserProfile.from_auth_user(user).is_profile_complete()

    def test_dict_round_trip_ignores_unknown_keys(self):
        """Test cached dicts with extra keys still load"""
        data = UserProfile.from_auth_user(user_payload()).to_dict()
        data["legacy"] = True
        profile = UserProfile.from_dict(data)
        assert isinstance(profile.location, Location)


class TestLeader:
    """Test leader mapping from an auth user"""

    @pytest.mark.parametrize("role,level", [
        ("DISTRICT_LEADER", "district"),
        ("SECTOR_LEADER", "sector"),
        ("CELL_LEADER", "cell"),
        ("ADMIN", "cell"),
        (None, "cell"),
    ])
    def test_level_from_role(self, role, level):
        """Test the level follows the role"""
        assert Leader.from_auth_user(user_payload(role=role)).level == level

    def test_defaults(self):
        """Test department and avatar defaults"""
        leader = Leader.from_auth_user(user_payload(profileUrl="http://img/1.png"), verified=False)
        assert leader.department == "Administration"
        assert leader.avatar == "http://img/1.png"
        assert leader.verified is False

    def test_complete_needs_district(self):
        """Test an admin profile is complete once a district is set"""
        leader = Leader.from_auth_user(user_payload(location={"district": "  "}))
        assert not leader.is_profile_complete()
        leader.location.district = "Gasabo"
        assert leader.is_profile_complete()


class TestContentRecords:
    """Test issue, topic and announcement mapping"""

    def test_issue_defaults(self):
        """Test missing optional fields get defaults"""
        issue = Issue.from_api({"id": "5", "title": "Flood"})
        assert issue.id == 5
        assert issue.status == "RECEIVED"
        assert issue.urgency == "LOW"
        assert issue.attachments == []
        assert issue.location.is_empty()

    def test_issue_enums(self):
        """Test enum fields accept any case and ignore unknown values"""
        issue = Issue.from_api({"id": 1, "issueType": "suggestion", "language": "KLINGON"})
        assert issue.issue_type == IssueType.SUGGESTION
        assert issue.language is None

    def test_topic_legacy_fields(self):
        """Test content/hashtags fall back to description/tags"""
        topic = Topic.from_api({"id": 2, "title": "Roads", "content": "Text", "hashtags": ["infra"]})
        assert topic.description == "Text"
        assert topic.tags == ["infra"]

    def test_announcement(self):
        """Test announcement view flags"""
        item = Announcement.from_api({"id": 1, "title": "Umuganda", "viewCount": 3, "hasViewed": True})
        assert item.view_count == 3
        assert item.has_viewed

    def test_department_names(self):
        """Test localized department names fall back to English"""
        dept = Department.from_api({"id": 1, "nameEn": "Health", "nameRw": "Ubuzima"})
        assert dept.name_for(Language.KINYARWANDA) == "Ubuzima"
        assert dept.name_for(Language.FRENCH) == "Health"

    def test_leader_search_result(self):
        """Test account status mapping"""
        result = LeaderSearchResult.from_api({"id": 3, "fullName": "Eric M", "accountStatus": "active"})
        assert result.user_id == 3
        assert result.account_status == AccountStatus.ACTIVE


class TestPage:
    """Test paged listings"""

    def test_from_api(self):
        """Test page metadata and item mapping"""
        page = Page.from_api({
            "content": [{"id": 1, "title": "a"}, {"id": 2, "title": "b"}],
            "number": 1, "size": 2, "totalElements": 6, "totalPages": 3, "first": False, "last": False,
        }, Issue.from_api)

        assert [i.id for i in page.content] == [1, 2]
        assert page.has_next and page.has_previous
        assert page.total_pages == 3

    def test_missing_metadata(self):
        """Test a bare content list counts as one page"""
        page = Page.from_api({"content": [{"id": 1}]}, Issue.from_api)
        assert page.total_elements == 1
        assert not page.has_next
