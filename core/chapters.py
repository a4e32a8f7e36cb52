"""
Chapter (surah) metadata. Display-only: nothing here takes part in matching.
"""
from dataclasses import dataclass, asdict
from typing import Dict, Any, List, Optional

REVELATION_TYPES = ("Meccan", "Medinan")


@dataclass(frozen=True)
class Chapter:
    number: int
    name: str
    english_name: str
    english_name_translation: str
    number_of_ayahs: int
    revelation_type: str

    def __post_init__(self):
        if self.revelation_type not in REVELATION_TYPES:
            raise ValueError(f"Unknown revelation type for surah {self.number}: {self.revelation_type!r}")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# (number, name, english_name, translation, ayahs, revelation)
_CHAPTER_TABLE = [
    (1, "الفاتحة", "Al-Faatiha", "The Opening", 7, "Meccan"),
    (2, "البقرة", "Al-Baqara", "The Cow", 286, "Medinan"),
    (3, "آل عمران", "Aal-i-Imraan", "The Family of Imraan", 200, "Medinan"),
    (4, "النساء", "An-Nisaa", "The Women", 176, "Medinan"),
    (5, "المائدة", "Al-Maaida", "The Table", 120, "Medinan"),
    (6, "الأنعام", "Al-An'aam", "The Cattle", 165, "Meccan"),
    (7, "الأعراف", "Al-A'raaf", "The Heights", 206, "Meccan"),
    (8, "الأنفال", "Al-Anfaal", "The Spoils of War", 75, "Medinan"),
    (9, "التوبة", "At-Tawba", "The Repentance", 129, "Medinan"),
    (10, "يونس", "Yunus", "Jonas", 109, "Meccan"),
    (11, "هود", "Hud", "Hud", 123, "Meccan"),
    (12, "يوسف", "Yusuf", "Joseph", 111, "Meccan"),
    (13, "الرعد", "Ar-Ra'd", "The Thunder", 43, "Medinan"),
    (14, "ابراهيم", "Ibrahim", "Abraham", 52, "Meccan"),
    (15, "الحجر", "Al-Hijr", "The Rock", 99, "Meccan"),
    (16, "النحل", "An-Nahl", "The Bee", 128, "Meccan"),
    (17, "الإسراء", "Al-Israa", "The Night Journey", 111, "Meccan"),
    (18, "الكهف", "Al-Kahf", "The Cave", 110, "Meccan"),
    (19, "مريم", "Maryam", "Mary", 98, "Meccan"),
    (20, "طه", "Taa-Haa", "Taa-Haa", 135, "Meccan"),
    (21, "الأنبياء", "Al-Anbiyaa", "The Prophets", 112, "Meccan"),
    (22, "الحج", "Al-Hajj", "The Pilgrimage", 78, "Medinan"),
    (23, "المؤمنون", "Al-Muminoon", "The Believers", 118, "Meccan"),
    (24, "النور", "An-Noor", "The Light", 64, "Medinan"),
    (25, "الفرقان", "Al-Furqaan", "The Criterion", 77, "Meccan"),
    (26, "الشعراء", "Ash-Shu'araa", "The Poets", 227, "Meccan"),
    (27, "النمل", "An-Naml", "The Ant", 93, "Meccan"),
    (28, "القصص", "Al-Qasas", "The Stories", 88, "Meccan"),
    (29, "العنكبوت", "Al-Ankaboot", "The Spider", 69, "Meccan"),
    (30, "الروم", "Ar-Room", "The Romans", 60, "Meccan"),
    (31, "لقمان", "Luqman", "Luqman", 34, "Meccan"),
    (32, "السجدة", "As-Sajda", "The Prostration", 30, "Meccan"),
    (33, "الأحزاب", "Al-Ahzaab", "The Clans", 73, "Medinan"),
    (34, "سبإ", "Saba", "Sheba", 54, "Meccan"),
    (35, "فاطر", "Faatir", "The Originator", 45, "Meccan"),
    (36, "يس", "Yaseen", "Yaseen", 83, "Meccan"),
    (37, "الصافات", "As-Saaffaat", "Those drawn up in Ranks", 182, "Meccan"),
    (38, "ص", "Saad", "The letter Saad", 88, "Meccan"),
    (39, "الزمر", "Az-Zumar", "The Groups", 75, "Meccan"),
    (40, "غافر", "Ghafir", "The Forgiver", 85, "Meccan"),
    (41, "فصلت", "Fussilat", "Explained in detail", 54, "Meccan"),
    (42, "الشورى", "Ash-Shura", "Consultation", 53, "Meccan"),
    (43, "الزخرف", "Az-Zukhruf", "Ornaments of gold", 89, "Meccan"),
    (44, "الدخان", "Ad-Dukhaan", "The Smoke", 59, "Meccan"),
    (45, "الجاثية", "Al-Jaathiya", "Crouching", 37, "Meccan"),
    (46, "الأحقاف", "Al-Ahqaf", "The Dunes", 35, "Meccan"),
    (47, "محمد", "Muhammad", "Muhammad", 38, "Medinan"),
    (48, "الفتح", "Al-Fath", "The Victory", 29, "Medinan"),
    (49, "الحجرات", "Al-Hujuraat", "The Inner Apartments", 18, "Medinan"),
    (50, "ق", "Qaaf", "The letter Qaaf", 45, "Meccan"),
    (51, "الذاريات", "Adh-Dhaariyat", "The Winnowing Winds", 60, "Meccan"),
    (52, "الطور", "At-Tur", "The Mount", 49, "Meccan"),
    (53, "النجم", "An-Najm", "The Star", 62, "Meccan"),
    (54, "القمر", "Al-Qamar", "The Moon", 55, "Meccan"),
    (55, "الرحمن", "Ar-Rahmaan", "The Beneficent", 78, "Medinan"),
    (56, "الواقعة", "Al-Waaqia", "The Inevitable", 96, "Meccan"),
    (57, "الحديد", "Al-Hadid", "The Iron", 29, "Medinan"),
    (58, "المجادلة", "Al-Mujaadila", "The Pleading Woman", 22, "Medinan"),
    (59, "الحشر", "Al-Hashr", "The Exile", 24, "Medinan"),
    (60, "الممتحنة", "Al-Mumtahana", "She that is to be examined", 13, "Medinan"),
    (61, "الصف", "As-Saff", "The Ranks", 14, "Medinan"),
    (62, "الجمعة", "Al-Jumu'a", "Friday", 11, "Medinan"),
    (63, "المنافقون", "Al-Munaafiqoon", "The Hypocrites", 11, "Medinan"),
    (64, "التغابن", "At-Taghaabun", "Mutual Disillusion", 18, "Medinan"),
    (65, "الطلاق", "At-Talaaq", "Divorce", 12, "Medinan"),
    (66, "التحريم", "At-Tahrim", "The Prohibition", 12, "Medinan"),
    (67, "الملك", "Al-Mulk", "The Sovereignty", 30, "Meccan"),
    (68, "القلم", "Al-Qalam", "The Pen", 52, "Meccan"),
    (69, "الحاقة", "Al-Haaqqa", "The Reality", 52, "Meccan"),
    (70, "المعارج", "Al-Ma'aarij", "The Ascending Stairways", 44, "Meccan"),
    (71, "نوح", "Nooh", "Noah", 28, "Meccan"),
    (72, "الجن", "Al-Jinn", "The Jinn", 28, "Meccan"),
    (73, "المزمل", "Al-Muzzammil", "The Enshrouded One", 20, "Meccan"),
    (74, "المدثر", "Al-Muddaththir", "The Cloaked One", 56, "Meccan"),
    (75, "القيامة", "Al-Qiyaama", "The Resurrection", 40, "Meccan"),
    (76, "الانسان", "Al-Insaan", "Man", 31, "Medinan"),
    (77, "المرسلات", "Al-Mursalaat", "The Emissaries", 50, "Meccan"),
    (78, "النبإ", "An-Naba", "The Announcement", 40, "Meccan"),
    (79, "النازعات", "An-Naazi'aat", "Those who drag forth", 46, "Meccan"),
    (80, "عبس", "Abasa", "He frowned", 42, "Meccan"),
    (81, "التكوير", "At-Takwir", "The Overthrowing", 29, "Meccan"),
    (82, "الإنفطار", "Al-Infitaar", "The Cleaving", 19, "Meccan"),
    (83, "المطففين", "Al-Mutaffifin", "Defrauding", 36, "Meccan"),
    (84, "الإنشقاق", "Al-Inshiqaaq", "The Splitting Open", 25, "Meccan"),
    (85, "البروج", "Al-Burooj", "The Constellations", 22, "Meccan"),
    (86, "الطارق", "At-Taariq", "The Morning Star", 17, "Meccan"),
    (87, "الأعلى", "Al-A'laa", "The Most High", 19, "Meccan"),
    (88, "الغاشية", "Al-Ghaashiya", "The Overwhelming", 26, "Meccan"),
    (89, "الفجر", "Al-Fajr", "The Dawn", 30, "Meccan"),
    (90, "البلد", "Al-Balad", "The City", 20, "Meccan"),
    (91, "الشمس", "Ash-Shams", "The Sun", 15, "Meccan"),
    (92, "الليل", "Al-Lail", "The Night", 21, "Meccan"),
    (93, "الضحى", "Ad-Dhuhaa", "The Morning Hours", 11, "Meccan"),
    (94, "الشرح", "Ash-Sharh", "The Consolation", 8, "Meccan"),
    (95, "التين", "At-Tin", "The Fig", 8, "Meccan"),
    (96, "العلق", "Al-Alaq", "The Clot", 19, "Meccan"),
    (97, "القدر", "Al-Qadr", "The Power, Fate", 5, "Meccan"),
    (98, "البينة", "Al-Bayyina", "The Evidence", 8, "Medinan"),
    (99, "الزلزلة", "Az-Zalzala", "The Earthquake", 8, "Medinan"),
    (100, "العاديات", "Al-Aadiyaat", "The Chargers", 11, "Meccan"),
    (101, "القارعة", "Al-Qaari'a", "The Calamity", 11, "Meccan"),
    (102, "التكاثر", "At-Takaathur", "Competition", 8, "Meccan"),
    (103, "العصر", "Al-Asr", "The Declining Day, Epoch", 3, "Meccan"),
    (104, "الهمزة", "Al-Humaza", "The Traducer", 9, "Meccan"),
    (105, "الفيل", "Al-Fil", "The Elephant", 5, "Meccan"),
    (106, "قريش", "Quraish", "Quraysh", 4, "Meccan"),
    (107, "الماعون", "Al-Maa'un", "Almsgiving", 7, "Meccan"),
    (108, "الكوثر", "Al-Kawthar", "Abundance", 3, "Meccan"),
    (109, "الكافرون", "Al-Kaafiroon", "The Disbelievers", 6, "Meccan"),
    (110, "النصر", "An-Nasr", "Divine Support", 3, "Medinan"),
    (111, "المسد", "Al-Masad", "The Palm Fibre", 5, "Meccan"),
    (112, "الإخلاص", "Al-Ikhlaas", "Sincerity", 4, "Meccan"),
    (113, "الفلق", "Al-Falaq", "The Dawn", 5, "Meccan"),
    (114, "الناس", "An-Naas", "Mankind", 6, "Meccan"),
]

CHAPTERS: List[Chapter] = [Chapter(*row) for row in _CHAPTER_TABLE]
_BY_NUMBER: Dict[int, Chapter] = {c.number: c for c in CHAPTERS}


def get_chapter(number: int) -> Optional[Chapter]:
    return _BY_NUMBER.get(number)


def get_all_chapters() -> List[Chapter]:
    return list(CHAPTERS)
