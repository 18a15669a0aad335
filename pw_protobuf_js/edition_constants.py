# Copyright 2026 The Pigweed Authors
#
# Licensed under the Apache License, Version 2.0 (the "License"); you may not
# use this file except in compliance with the License. You may obtain a copy of
# the License at
#
#     https://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS, WITHOUT
# WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied. See the
# License for the specific language governing permissions and limitations under
# the License.
"""Protobuf editions constants used when resolving field features."""

import enum

# From the CodeGeneratorResponse message, indicating that a generator plugin
# supports Protobuf editions.
FEATURE_SUPPORTS_EDITIONS = 2


# Field presence enum from the FeatureSet message.
class FieldPresence(enum.Enum):
    FIELD_PRESENCE_UNKNOWN = 0
    EXPLICIT = 1
    IMPLICIT = 2
    LEGACY_REQUIRED = 3


# Repeated field encoding enum from the FeatureSet message.
class RepeatedFieldEncoding(enum.Enum):
    REPEATED_FIELD_ENCODING_UNKNOWN = 0
    PACKED = 1
    EXPANDED = 2


# Edition enum from the descriptor proto.
class Edition(enum.Enum):
    EDITION_UNKNOWN = 0
    EDITION_LEGACY = 900
    EDITION_PROTO2 = 998
    EDITION_PROTO3 = 999
    EDITION_2023 = 1000


# Feature values that apply to a file declaring an edition when nothing more
# specific is set.
EDITION_DEFAULT_FIELD_PRESENCE = FieldPresence.EXPLICIT
EDITION_DEFAULT_REPEATED_FIELD_ENCODING = RepeatedFieldEncoding.PACKED
