# Badger Dispatch — Database Models
# Import all models here for SQLAlchemy discovery

from app.models.status_value import StatusValue              # noqa
from app.models.loading_door import LoadingDoor              # noqa
from app.models.printroom_entry import PrintroomEntry        # noqa
from app.models.staging_door import StagingDoor              # noqa
from app.models.live_movement import LiveMovement            # noqa
from app.models.automation_rule import AutomationRule        # noqa
from app.models.profile import Profile                       # noqa
from app.models.truck_subscription import TruckSubscription  # noqa
from app.models.notification import Notification, NotificationPreference  # noqa
