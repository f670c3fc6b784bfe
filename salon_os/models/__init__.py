from salon_os.models.tenant import Tenant
from salon_os.models.user import User, UserRole
from salon_os.models.customer import Customer, CustomerPhoneToken
from salon_os.models.day_end_report import DayEndReport
from salon_os.models.expense import Expense
