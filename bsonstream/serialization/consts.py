# Copyright 2025 Hathor Labs
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#    http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

# default cap for a single write_bytes/read_bytes call, 16MiB
DEFAULT_BYTES_MAX_LENGTH: int = 16 * 1024 * 1024

INT32_MIN: int = -(2**31)
INT32_MAX: int = 2**31 - 1
INT64_MIN: int = -(2**63)
INT64_MAX: int = 2**63 - 1
UINT32_MAX: int = 2**32 - 1
