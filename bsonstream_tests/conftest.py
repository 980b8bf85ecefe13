import os

from bsonstream.conf import CONFIG_YAML_ENV_VAR, UNITTESTS_SETTINGS_FILEPATH
from bsonstream.conf.get_settings import get_global_settings

os.environ[CONFIG_YAML_ENV_VAR] = os.environ.get('BSONSTREAM_TEST_CONFIG_YAML', UNITTESTS_SETTINGS_FILEPATH)

# load once up front, so the debug event of the first load isn't captured as output of whichever test comes first
get_global_settings()
