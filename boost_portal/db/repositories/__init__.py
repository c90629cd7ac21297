from boost_portal.db.repositories.users import UserProfilesRepository
from boost_portal.db.repositories.companies import CompaniesRepository
from boost_portal.db.repositories.account_ids import CompanyAccountIdsRepository
from boost_portal.db.repositories.campaigns import CampaignsRepository
from boost_portal.db.repositories.audience_requests import AudienceRequestsRepository
from boost_portal.db.repositories.comments import CampaignCommentsRepository
from boost_portal.db.repositories.audit import AuditRepository
from boost_portal.db.repositories.notifications import NotificationsRepository
from boost_portal.db.repositories.audiences import AudiencesRepository
from boost_portal.db.repositories.advertiser_accounts import AdvertiserAccountsRepository
