from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession
from config import ApplicationConfig
from src.adapter.repositories.dashboard_repository import SqlAlchemyDashboardRepository
from src.adapter.services import (
    SqlAlchemyUnitOfWork,
    StripePaymentGateway,
    DocuSignProvider,
    BoldSignProvider,
    VeriffClient,
    LocalDocumentStorage,
    S3DocumentStorage,
    InMemoryTTLCache,
    BcryptPasswordHasher,
    ReportLabPdfService,
    create_notification_service,
)
from src.app.repositories import DashboardRepository
from src.app.services import (
    PaymentGateway,
    ESignProvider,
    VerificationMediaClient,
    DocumentStorage,
    Cache,
    PasswordHasher,
    PdfService,
    NotificationService,
)

engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)

# Shared across requests so cached KPIs outlive a single call
dashboard_cache = InMemoryTTLCache(ttl_seconds=ApplicationConfig.DASHBOARD_CACHE_TTL_SECONDS)


async def get_session() -> AsyncSession:
    async with AsyncSessionLocal() as session:
        yield session


async def get_unit_of_work():
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUnitOfWork(session)


def get_dashboard_repository() -> DashboardRepository:
    return SqlAlchemyDashboardRepository(AsyncSessionLocal)


def get_dashboard_cache() -> Cache:
    return dashboard_cache


def get_payment_gateway() -> PaymentGateway:
    return StripePaymentGateway(api_key=ApplicationConfig.STRIPE_SECRET_KEY)


def get_docusign_provider() -> ESignProvider:
    return DocuSignProvider(
        integration_key=ApplicationConfig.DOCUSIGN_INTEGRATION_KEY,
        user_id=ApplicationConfig.DOCUSIGN_USER_ID,
        private_key=ApplicationConfig.DOCUSIGN_PRIVATE_KEY,
        base_url=ApplicationConfig.DOCUSIGN_BASE_URL,
    )


def get_boldsign_provider() -> ESignProvider:
    return BoldSignProvider(
        api_key=ApplicationConfig.BOLDSIGN_API_KEY,
        base_url=ApplicationConfig.BOLDSIGN_BASE_URL,
    )


def get_verification_client() -> VerificationMediaClient:
    return VeriffClient(
        api_key=ApplicationConfig.VERIFF_API_KEY,
        api_secret=ApplicationConfig.VERIFF_API_SECRET,
        base_url=ApplicationConfig.VERIFF_BASE_URL,
    )


def get_document_storage() -> DocumentStorage:
    if ApplicationConfig.DOCUMENT_STORAGE_BACKEND == "local":
        return LocalDocumentStorage(
            root_dir=ApplicationConfig.DOCUMENT_STORAGE_DIR,
            public_base_url=ApplicationConfig.DOCUMENT_PUBLIC_BASE_URL,
        )
    return S3DocumentStorage(
        bucket_name=ApplicationConfig.S3_BUCKET_NAME,
        region=ApplicationConfig.AWS_REGION,
        access_key_id=ApplicationConfig.AWS_ACCESS_KEY_ID,
        secret_access_key=ApplicationConfig.AWS_SECRET_ACCESS_KEY,
        public_base_url=ApplicationConfig.S3_PUBLIC_BASE_URL,
    )


def get_password_hasher() -> PasswordHasher:
    return BcryptPasswordHasher()


def get_pdf_service() -> PdfService:
    return ReportLabPdfService()


def get_notification_service() -> NotificationService:
    return create_notification_service(ApplicationConfig.NOTIFICATION_WEBHOOK_URL)
