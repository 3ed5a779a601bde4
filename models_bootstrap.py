# models_bootstrap.py
from location import models as _location_models
from contract import models as _contract_models
from shifttemplate import models as _shifttemplate_models
from shift import models as _shift_models
from messaging import models as _messaging_models
