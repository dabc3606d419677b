# Models package - normalized database models
from minicrm.models.user import User, Workspace, WorkspaceMember
from minicrm.models.pipeline import PipelineStage, StageRequiredField
from minicrm.models.lead import Lead, LeadCustomField, LeadCustomValue
from minicrm.models.campaign import Campaign
from minicrm.models.message import GeneratedMessage
