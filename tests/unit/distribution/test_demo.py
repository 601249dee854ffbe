"""Tests for demo account assignments."""

from stream_share_core.constants import DEMO_CREDENTIAL_ID, DEMO_PASSWORD, AlertMessage
from stream_share_core.distribution.demo import demo_assignment, service_slug
from stream_share_core.enums import AssignmentStatus


class TestDemoAssignment:
    def test_service_slug(self):
        assert service_slug("Viki Pass|2024-05-01T00:00:00Z") == "vikipass"
        assert service_slug("Kocowa+") == "kocowa"

    def test_demo_credential(self, base_time):
        result = demo_assignment("Viki Pass|2024-05-01", now=base_time)

        assert result.status == AssignmentStatus.DEMO
        assert result.alert == AlertMessage.DEMO_MODE.value
        assert result.days_active == 1
        assert result.credential.id == DEMO_CREDENTIAL_ID
        assert result.credential.service == "Viki Pass"
        assert result.credential.email == "demo.vikipass@eudorama.com"
        assert result.credential.password == DEMO_PASSWORD
        assert result.credential.published_at == base_time
