# Copyright 2025 podgate
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Apple Podcasts category validation for the feed's itunes:category tags.

Categories in the metadata document may be written as a plain string
("Technology"), a "Category > Subcategory" string, or a mapping in either
``{text, subcats}`` or ``{cat, sub}`` form. Anything outside Apple's
taxonomy is dropped.

Reference: https://podcasters.apple.com/support/1691-apple-podcasts-categories
"""

from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional

from structlog import get_logger

logger = get_logger(__name__)

# Apple Podcasts taxonomy: main categories mapped to their valid subcategories
# Categories without subcategories map to empty sets
APPLE_PODCAST_TAXONOMY: dict[str, set[str]] = {
    "Arts": {
        "Books",
        "Design",
        "Fashion & Beauty",
        "Food",
        "Performing Arts",
        "Visual Arts",
    },
    "Business": {
        "Careers",
        "Entrepreneurship",
        "Investing",
        "Management",
        "Marketing",
        "Non-Profit",
    },
    "Comedy": {
        "Comedy Interviews",
        "Improv",
        "Stand-Up",
    },
    "Education": {
        "Courses",
        "How To",
        "Language Learning",
        "Self-Improvement",
    },
    "Fiction": {
        "Comedy Fiction",
        "Drama",
        "Science Fiction",
    },
    "Government": set(),  # No subcategories
    "Health & Fitness": {
        "Alternative Health",
        "Fitness",
        "Medicine",
        "Mental Health",
        "Nutrition",
        "Sexuality",
    },
    "History": set(),  # No subcategories
    "Kids & Family": {
        "Education for Kids",
        "Parenting",
        "Pets & Animals",
        "Stories for Kids",
    },
    "Leisure": {
        "Animation & Manga",
        "Automotive",
        "Aviation",
        "Crafts",
        "Games",
        "Hobbies",
        "Home & Garden",
        "Video Games",
    },
    "Music": {
        "Music Commentary",
        "Music History",
        "Music Interviews",
    },
    "News": {
        "Business News",
        "Daily News",
        "Entertainment News",
        "News Commentary",
        "Politics",
        "Sports News",
        "Tech News",
    },
    "Religion & Spirituality": {
        "Buddhism",
        "Christianity",
        "Hinduism",
        "Islam",
        "Judaism",
        "Religion",
        "Spirituality",
    },
    "Science": {
        "Astronomy",
        "Chemistry",
        "Earth Sciences",
        "Life Sciences",
        "Mathematics",
        "Natural Sciences",
        "Nature",
        "Physics",
        "Social Sciences",
    },
    "Society & Culture": {
        "Documentary",
        "Personal Journals",
        "Philosophy",
        "Places & Travel",
        "Relationships",
    },
    "Sports": {
        "Baseball",
        "Basketball",
        "Cricket",
        "Fantasy Sports",
        "Football",
        "Golf",
        "Hockey",
        "Rugby",
        "Running",
        "Soccer",
        "Swimming",
        "Tennis",
        "Volleyball",
        "Wilderness",
        "Wrestling",
    },
    "Technology": set(),  # No subcategories
    "True Crime": set(),  # No subcategories
    "TV & Film": {
        "After Shows",
        "Film History",
        "Film Interviews",
        "Film Reviews",
        "TV Reviews",
    },
}

# Set of all valid main categories for quick lookup
VALID_CATEGORIES: set[str] = set(APPLE_PODCAST_TAXONOMY.keys())


@dataclass
class ValidatedCategory:
    """A category accepted for the feed, with an optional valid subcategory."""

    category: str
    subcategory: Optional[str] = None


def validate_category(category: Optional[str], subcategory: Optional[str] = None) -> Optional[ValidatedCategory]:
    """
    Validate a category and subcategory against Apple's taxonomy.

    Returns:
        - None if the category is missing or invalid
        - (category, None) if only the subcategory is invalid
        - (category, subcategory) if both are valid
    """
    if not category or category not in VALID_CATEGORIES:
        return None
    if subcategory and subcategory in APPLE_PODCAST_TAXONOMY[category]:
        return ValidatedCategory(category=category, subcategory=subcategory)
    return ValidatedCategory(category=category)


def _category_pairs(raw: Any) -> List[tuple]:
    if isinstance(raw, str):
        category, _, subcategory = raw.partition(">")
        return [(category.strip(), subcategory.strip() or None)]

    if isinstance(raw, Mapping):
        category = raw.get("text", raw.get("cat"))
        if not isinstance(category, str):
            return []
        subcats = raw.get("subcats", raw.get("sub"))
        if isinstance(subcats, str):
            return [(category, subcats)]
        if isinstance(subcats, list):
            names = [sub.get("text") if isinstance(sub, Mapping) else sub for sub in subcats]
            names = [name for name in names if isinstance(name, str)]
            if names:
                return [(category, name) for name in names]
        return [(category, None)]

    return []


def normalize_categories(raw_categories: Iterable[Any]) -> List[ValidatedCategory]:
    """
    Turn metadata category entries into validated, de-duplicated categories.

    Invalid entries are logged and dropped; they never fail the feed.

    Args:
        raw_categories: Category entries as written in the metadata document

    Returns:
        Validated categories in document order
    """
    result: List[ValidatedCategory] = []
    for raw in raw_categories:
        pairs = _category_pairs(raw)
        if not pairs:
            logger.warning("podcast_category_ignored", value=repr(raw))
        for category, subcategory in pairs:
            validated = validate_category(category, subcategory)
            if validated is None:
                logger.warning("podcast_category_ignored", value=category)
                continue
            if subcategory and validated.subcategory is None:
                logger.warning("podcast_subcategory_ignored", category=category, value=subcategory)
            if validated not in result:
                result.append(validated)
    return result
