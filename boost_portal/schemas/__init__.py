from boost_portal.schemas.users import (
    InviteUserRequest,
    InviteUserResponse,
    SignupRequest,
    UserProfileResponse,
    UserProfileUpdateRequest,
)
from boost_portal.schemas.companies import (
    CompanyAccountIdCreate,
    CompanyAccountIdResponse,
    CompanyAccountIdUpdate,
    CompanyCreate,
    CompanyResponse,
    CompanyUpdate,
)
from boost_portal.schemas.campaigns import (
    ActivityLogResponse,
    CampaignCreate,
    CampaignResponse,
    CampaignStatusChange,
    CampaignUpdate,
    CommentCreate,
    CommentResponse,
    CommentUpdate,
    Platforms,
    WorkflowHistoryResponse,
)
from boost_portal.schemas.audience_requests import (
    AudienceRequestCreate,
    AudienceRequestResponse,
    AudienceRequestReview,
    AudienceRequestReviewResponse,
)
from boost_portal.schemas.catalog import (
    AdvertiserAccountCreate,
    AdvertiserAccountResponse,
    AdvertiserAccountUpdate,
    AudienceCreate,
    AudienceResponse,
    AudienceUpdate,
    NotificationCreate,
    NotificationResponse,
)
