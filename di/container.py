"""Dependency injection containers for the Support Chat API."""
from __future__ import annotations

from dependency_injector import containers, providers

from core.settings import get_settings
from infra.resources import DatabaseResource, build_completion_client


class InfrastructureContainer(containers.DeclarativeContainer):
    """Infrastructure layer dependencies."""

    settings = providers.Singleton(get_settings)

    # Database
    database = providers.Resource(
        DatabaseResource,
        database_url=settings.provided.DATABASE.DATABASE_URL,
    )

    # Completion provider client (None when no key is configured)
    completion_client = providers.Singleton(
        build_completion_client,
        api_key=settings.provided.LLM.GROQ_API_KEY.get_secret_value.call(),
        base_url=settings.provided.LLM.LLM_BASE_URL,
    )


class ServiceContainer(containers.DeclarativeContainer):
    """Application services - depends on infrastructure."""

    infrastructure = providers.DependenciesContainer()

    conversation_store = providers.Singleton(
        "api.features.chat.store.ConversationStore",
        database=infrastructure.database,
    )

    completion_service = providers.Singleton(
        "api.features.chat.completion.CompletionService",
        client=infrastructure.completion_client,
        model=infrastructure.settings.provided.LLM.LLM_MODEL,
        temperature=infrastructure.settings.provided.LLM.LLM_TEMPERATURE,
        max_tokens=infrastructure.settings.provided.LLM.LLM_MAX_TOKENS,
        history_window=infrastructure.settings.provided.LLM.HISTORY_WINDOW,
    )

    # Singleton so per-session locks are shared across requests
    chat_service = providers.Singleton(
        "api.features.chat.service.ChatService",
        store=conversation_store,
        completion=completion_service,
        max_message_length=infrastructure.settings.provided.CHAT.MAX_MESSAGE_LENGTH,
        serialize_sessions=infrastructure.settings.provided.CHAT.SERIALIZE_SESSIONS,
    )


class ControllerContainer(containers.DeclarativeContainer):
    """Controller-specific dependencies."""

    services = providers.DependenciesContainer()

    chat_controller = providers.Factory(
        "api.features.chat.controller.ChatController",
        chat_service=services.chat_service,
    )


class ApplicationContainer(containers.DeclarativeContainer):
    """Main application container composing all sub-containers."""

    wiring_config = containers.WiringConfiguration(
        modules=[
            "api.features.chat.router",
        ]
    )

    infrastructure = providers.Container(InfrastructureContainer)
    services = providers.Container(ServiceContainer, infrastructure=infrastructure)
    controllers = providers.Container(ControllerContainer, services=services)
