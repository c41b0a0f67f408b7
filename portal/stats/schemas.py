from pydantic import Field
from enum import Enum
from typing import List, Optional

from portal.api.schemas import ApiModel


class TimeRange(str, Enum):
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


class MonthCount(ApiModel):
    month: str
    count: int = 0


class CategoryCount(ApiModel):
    category: str
    count: int = 0


class AgencyCount(ApiModel):
    agency: str
    count: int = 0


class RoleCount(ApiModel):
    role: str
    count: int = 0


class RatingCount(ApiModel):
    rating: int
    count: int = 0


class AgencyPerformance(ApiModel):
    name: str
    resolution_rate: float = Field(0, alias="resolutionRate")


# STAT GROUPS
class UserStats(ApiModel):
    total_users: int = Field(0, alias="totalUsers")
    active_users: int = Field(0, alias="activeUsers")
    new_users_this_month: int = Field(0, alias="newUsersThisMonth")
    user_growth_by_month: List[MonthCount] = Field(default_factory=list, alias="userGrowthByMonth")


class ComplaintStats(ApiModel):
    total_complaints: int = Field(0, alias="totalComplaints")
    open_complaints: int = Field(0, alias="openComplaints")
    resolved_complaints: int = Field(0, alias="resolvedComplaints")
    # days
    average_resolution_time: float = Field(0, alias="averageResolutionTime")
    complaints_by_category: List[CategoryCount] = Field(default_factory=list, alias="complaintsByCategory")
    complaints_by_agency: List[AgencyCount] = Field(default_factory=list, alias="complaintsByAgency")
    complaint_trend_by_month: List[MonthCount] = Field(default_factory=list, alias="complaintTrendByMonth")

    @property
    def resolution_rate(self) -> float:
        """Resolved share of all complaints, in percent."""
        if not self.total_complaints:
            return 0.0
        return round(self.resolved_complaints / self.total_complaints * 100, 1)


class StaffStats(ApiModel):
    total_staff: int = Field(0, alias="totalStaff")
    active_staff: int = Field(0, alias="activeStaff")
    staff_by_role: List[RoleCount] = Field(default_factory=list, alias="staffByRole")


class AgencyStats(ApiModel):
    total_agencies: int = Field(0, alias="totalAgencies")
    active_agencies: int = Field(0, alias="activeAgencies")
    top_performing_agencies: List[AgencyPerformance] = Field(default_factory=list, alias="topPerformingAgencies")


class FeedbackStats(ApiModel):
    average_satisfaction_score: float = Field(0, alias="averageSatisfactionScore")
    feedback_count: int = Field(0, alias="feedbackCount")
    feedback_by_rating: List[RatingCount] = Field(default_factory=list, alias="feedbackByRating")


class DashboardStats(ApiModel):
    user_stats: UserStats = Field(default_factory=UserStats, alias="userStats")
    complaint_stats: ComplaintStats = Field(default_factory=ComplaintStats, alias="complaintStats")
    staff_stats: StaffStats = Field(default_factory=StaffStats, alias="staffStats")
    agency_stats: AgencyStats = Field(default_factory=AgencyStats, alias="agencyStats")
    feedback_stats: FeedbackStats = Field(default_factory=FeedbackStats, alias="feedbackStats")
    generated_for: Optional[TimeRange] = None
