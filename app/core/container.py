from app.core.auth import IdentityClient
from application.services.template_service import TemplateService


class Container:
    def __init__(self):
        # Lazy Singletons
        self._identity_client = None
        self._template_service = None

    @property
    def identity_client(self) -> IdentityClient:
        if not self._identity_client:
            self._identity_client = IdentityClient()
        return self._identity_client

    @identity_client.setter
    def identity_client(self, client) -> None:
        self._identity_client = client

    @property
    def template_service(self) -> TemplateService:
        if not self._template_service:
            self._template_service = TemplateService()
        return self._template_service

    @template_service.setter
    def template_service(self, service) -> None:
        self._template_service = service


# Global Container Instance
container = Container()
