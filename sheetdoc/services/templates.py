from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ..models.template_spec import GenerationStrategy, RowPolicy, TemplateSpec

if TYPE_CHECKING:
    from ..render.store import TemplateStore

"""Template registry: template id -> TemplateSpec.

Pure data. Sheet keywords, field synonym tables (canonical field -> candidate headers,
tried in order) and the strategy / row policies of the nine known templates. Unknown
template ids fall back to a per-row spec with no sheet keywords.
"""

__all__ = [
    "UNIT_NAME_KEYS",
    "DEFAULT_FILENAME_FIELDS",
    "TEMPLATE_REGISTRY",
    "get_template_spec",
    "list_available_templates",
]

UNIT_NAME_KEYS = ("Unit_name", "ชื่อหน่วยการเรียนรู้", "ชื่อหน่วย")
# ลำดับการตั้งชื่อไฟล์ของ template แบบหนึ่งแถวต่อหนึ่งเอกสาร
DEFAULT_FILENAME_FIELDS = ("ชื่อวิชา", "รหัสวิชา", "เลขที่", "ชื่อสกุล")

_UNIT_KEYWORDS = ("หน่วยการเรียน", "unit", "Unit_name")

COURSE_FIELDS: dict[str, tuple[str, ...]] = {
    "หลักสูตร": ("หลักสูตร",),
    "ประเภทวิชา": ("ประเภทวิชา",),
    "รหัสวิชา": ("course_code", "รหัสวิชา"),
    "ชื่อวิชา": ("ชื่อวิชา ไทย", "subject_name_th", "ชื่อวิชา"),
    "ชื่อวิชาอังกฤษ": ("subject_name_en", "ชื่อวิชา อังกฤษ"),
    "ทฤษฎี": ("ทฤษฎี",),
    "ปฏิบัติ": ("ปฏิบัติ",),
    "หน่วยกิต": ("หน่วยกิต",),
    "อ้างอิงมาตรฐาน": ("refer",),
    "ผลลัพธ์รายวิชา": ("outcom", "ผลลัพธ์การเรียนรู้ระดับรายวิชา", "ผลลัพธ์รายวิชา"),
    "จุดประสงค์รายวิชา": ("objective",),
    "สมรรถนะรายวิชา": ("competency",),
    "คำอธิบายรายวิชา": ("course_description",),
    "เครื่องมือ": ("เครื่องมือ/สิ่งนำมาสอน", "เครื่องมือ"),
}

UNIT_LIST_FIELDS: dict[str, tuple[str, ...]] = {
    "ชื่อหน่วยการเรียนรู้": UNIT_NAME_KEYS + ("หน่วยการเรียนรู้",),
}

VOCATIONAL_FIELDS: dict[str, tuple[str, ...]] = {
    "มาตรฐานอาชีพ": ("มาตรฐานอาชีพ",),
    "หน้าที่หลัก": ("หน้าที่หลัก (Key Function)", "หน้าที่หลัก"),
    "หน่วยสมรรถนะ": ("หน่วยสมรรถนะ (Unit of Competence)", "หน่วยสมรรถนะ"),
    "สมรรถนะย่อย": ("สมรรถนะย่อย (Element)", "สมรรถนะย่อย"),
    "เกณฑ์การปฏิบัติงาน": (
        "เกณฑ์ในการปฏิบัติงาน (Performance Criteria)",
        "เกณฑ์การปฏิบัติงาน",
        "เกณฑ์ในการปฏิบัติงาน",
    ),
    "วิธีการประเมิน": ("วิธีการประเมิน (Assessment)", "วิธีการประเมิน"),
}

LEARNING_PLAN_FIELDS: dict[str, tuple[str, ...]] = {
    "Unit_name": UNIT_NAME_KEYS,
    "Outcom": ("Outcom", "Outcome", "ผลลัพธ์การเรียนรู้"),
    "tpqi": ("tpqi", "ตัวบ่งชี้"),
    "objective": ("objective", "วัตถุประสงค์"),
    "Learning_content": ("Learning_content", "เนื้อหาการเรียนรู้"),
    "Learning_activities": ("Learning_activities", "กิจกรรมการเรียนรู้"),
    "learning_resources": ("learning_resources", "แหล่งการเรียนรู้"),
    "Evidence_learning": ("Evidence_learning", "หลักฐานการเรียนรู้"),
    "Evaluation": ("Evaluation", "การประเมินผล"),
}

KNOWLEDGE_FIELDS: dict[str, tuple[str, ...]] = {
    "Unit_name": UNIT_NAME_KEYS,
    "Outcom": ("Outcom", "Outcome", "ผลลัพธ์การเรียนรู้"),
    "tpqi": ("tpqi", "ตัวบ่งชี้"),
    "objective": ("objective", "วัตถุประสงค์"),
    "content": ("content", "เนื้อหา"),
    "test": ("test", "แบบทดสอบ"),
    "references": ("references", "แหล่งอ้างอิง"),
    "answers": ("answers", "เฉลย"),
}

WORK_SHEET_FIELDS: dict[str, tuple[str, ...]] = {
    "ใบงานที่": ("ใบงานที่",),
    "ผลลัพธ์การเรียนรู้จากการปฏิบัติงาน": ("ผลลัพธ์การเรียนรู้จากการปฏิบัติงาน",),
    "สมรรถนะการปฏิบัติงาน": ("สมรรถนะการปฏิบัติงาน",),
    "จุดประสงค์เชิงพฤติกรรม": ("จุดประสงค์เชิงพฤติกรรม",),
    "เครื่องมือวัสดุและอุปกรณ์": ("เครื่องมือ วัสดุ และอุปกรณ์",),
    "คำแนะนำข้อควรระวัง": ("คำแนะนำ/ข้อควรระวัง",),
    "ขั้นตอนการปฏิบัติงาน": ("ขั้นตอนการปฏิบัติงาน",),
    "สรุปและวิจารณ์ผล": ("สรุปและวิจารณ์ผล",),
    "การประเมินผล": ("การประเมินผล",),
    "เอกสารอ้างอิงเอกสารค้นคว้าเพิ่มเติม": ("เอกสารอ้างอิง / เอกสารค้นคว้าเพิ่มเติม",),
}

WORK_ASSIGNMENT_FIELDS: dict[str, tuple[str, ...]] = {
    "ใบมอบหมายงานที่": ("ใบมอบหมายงานที่",),
    "ผลงานหรือผลการปฏิบัติงาน": ("ผลงานหรือผลการปฏิบัติงาน",),
    "สมรรถนะการปฏิบัติงาน": ("สมรรถนะการปฏิบัติงาน",),
    "จุดประสงค์เชิงพฤติกรรม": ("จุดประสงค์เชิงพฤติกรรม",),
    "รายละเอียดของงาน": ("รายละเอียดของงาน",),
    "กำหนดเวลาส่งงาน": ("กำหนดเวลาส่งงาน",),
    "แนวทางในการปฏิบัติงาน": ("แนวทางในการปฏิบัติงาน",),
    "แหล่งข้อมูลค้นคว้าเพิ่มเติม": ("แหล่งข้อมูลค้นคว้าเพิ่มเติม",),
    "การประเมินผล": ("การประเมินผล",),
}

ACTIVITY_FIELDS: dict[str, tuple[str, ...]] = {
    "ใบกิจกรรมที่": ("ใบกิจกรรมที่",),
    "ผลลัพธ์การเรียนรู้การปฏิบัติกิจกรรม": ("ผลลัพธ์การเรียนรู้การปฏิบัติกิจกรรม",),
    "สมรรถนะประจำกิจกรรม": ("สมรรถนะประจำกิจกรรม",),
    "จุดประสงค์เชิงพฤติกรรม": ("จุดประสงค์เชิงพฤติกรรม",),
    "เครื่องมือ_วัสดุ_และอุปกรณ์": ("เครื่องมือ วัสดุ และอุปกรณ์",),
    "ขั้นตอนการปฏิบัติกิจกรรม": ("ขั้นตอนการปฏิบัติกิจกรรม",),
    "สรุปและอภิปรายผล": ("สรุปและอภิปรายผล",),
    "การประเมินผล": ("การประเมินผล",),
    "เอกสารอ้างอิง_เอกสารค้นคว้าเพิ่มเติม": ("เอกสารอ้างอิง / เอกสารค้นคว้าเพิ่มเติม",),
}


TEMPLATE_REGISTRY: dict[str, TemplateSpec] = {
    spec.template_id: spec
    for spec in (
        TemplateSpec(
            template_id="course",
            strategy=GenerationStrategy.PER_ROW,
            required_sheet_keywords=("หลักสูตรรายวิชา", "course", "รายวิชา"),
            field_synonyms=COURSE_FIELDS,
            filename_fields=DEFAULT_FILENAME_FIELDS,
            display_name="หลักสูตรรายวิชา",
            description="สำหรับสร้างเอกสารหลักสูตรรายวิชา",
        ),
        TemplateSpec(
            template_id="Unit_name",
            strategy=GenerationStrategy.SINGLE_AGGREGATE,
            required_sheet_keywords=_UNIT_KEYWORDS,
            field_synonyms=UNIT_LIST_FIELDS,
            persistence=RowPolicy.UNIT_ONLY,
            render_filter=RowPolicy.UNIT_ONLY,
            file_prefix="Unit_Learning",
            display_name="หน่วยการเรียนรู้",
            description="สำหรับสร้างเอกสารหน่วยการเรียนรู้",
        ),
        TemplateSpec(
            template_id="Behavioral_analysis_table",
            strategy=GenerationStrategy.SINGLE_AGGREGATE,
            required_sheet_keywords=_UNIT_KEYWORDS,
            field_synonyms=UNIT_LIST_FIELDS,
            persistence=RowPolicy.UNIT_ONLY,
            render_filter=RowPolicy.UNIT_ONLY,
            file_prefix="Behavioral_Analysis",
            display_name="ตารางวิเคราะห์พฤติกรรมการเรียนรู้",
            description="สำหรับสร้างตารางวิเคราะห์พฤติกรรมการเรียนรู้",
        ),
        TemplateSpec(
            template_id="Vocational_standard",
            strategy=GenerationStrategy.FIRST_ROW_TABLE,
            required_sheet_keywords=("มาตรฐานวิชาชีพ", "vocational", "standard", "มาตรฐาน"),
            field_synonyms=VOCATIONAL_FIELDS,
            persistence=RowPolicy.FIRST_ROW,
            file_prefix="Vocational_Standard",
            display_name="มาตรฐานวิชาชีพ",
            description="สำหรับสร้างหนังสือมาตรฐานวิชาชีพ",
        ),
        TemplateSpec(
            template_id="Learning_management_plan",
            strategy=GenerationStrategy.UNIT_MULTI_OUTPUT,
            required_sheet_keywords=_UNIT_KEYWORDS,
            field_synonyms=LEARNING_PLAN_FIELDS,
            persistence=RowPolicy.UNIT_ONLY,
            render_filter=RowPolicy.UNIT_ONLY,
            filename_fields=("Unit_name",),
            file_prefix="Learning_management_plan",
            display_name="แผนการจัดการเรียนรู้",
            description="สำหรับสร้างแผนการจัดการเรียนรู้",
        ),
        TemplateSpec(
            template_id="Knowledge_sheet",
            strategy=GenerationStrategy.UNIT_CORRELATED,
            required_sheet_keywords=("หน่วยการเรียน", "เนื้อหา", "แบบฝึกหัดแบบทดสอบ", "unit", "Unit_name"),
            field_synonyms=KNOWLEDGE_FIELDS,
            persistence=RowPolicy.UNIT_ONLY,
            render_filter=RowPolicy.UNIT_ONLY,
            filename_fields=("Unit_name",),
            file_prefix="Knowledge_sheet",
            display_name="ใบความรู้",
            description="สำหรับสร้างใบความรู้",
        ),
        TemplateSpec(
            template_id="Work_Assignment",
            strategy=GenerationStrategy.PER_ROW_FLAT,
            required_sheet_keywords=("ใบมอบหมายงาน", "assignment", "work_assignment"),
            field_synonyms=WORK_ASSIGNMENT_FIELDS,
            filename_fields=("ใบมอบหมายงานที่",),
            file_prefix="Work_Assignment",
            display_name="ใบมอบหมายงาน",
            description="สำหรับสร้างใบมอบหมายงาน",
        ),
        TemplateSpec(
            template_id="work_sheet",
            strategy=GenerationStrategy.PER_ROW_FLAT,
            required_sheet_keywords=("ใบงาน", "work_sheet", "worksheet"),
            field_synonyms=WORK_SHEET_FIELDS,
            filename_fields=("ใบงานที่",),
            file_prefix="work_sheet",
            display_name="ใบงาน",
            description="สำหรับสร้างใบงาน",
        ),
        TemplateSpec(
            template_id="Activity_documents",
            strategy=GenerationStrategy.PER_ROW_FLAT,
            required_sheet_keywords=("ใบกิจกรรม", "activity", "activities"),
            field_synonyms=ACTIVITY_FIELDS,
            filename_fields=("ใบกิจกรรมที่",),
            file_prefix="Activity_documents",
            display_name="ใบกิจกรรม",
            description="สำหรับสร้างใบกิจกรรม",
        ),
    )
}


def get_template_spec(template_id: str) -> TemplateSpec:
    """Registered spec, or a per-row fallback (no sheet keywords, raw row fields)."""
    spec = TEMPLATE_REGISTRY.get(template_id)
    if spec is not None:
        return spec
    return TemplateSpec(
        template_id=template_id,
        strategy=GenerationStrategy.PER_ROW,
        filename_fields=DEFAULT_FILENAME_FIELDS,
        registered=False,
    )


def list_available_templates(store: TemplateStore) -> list[dict[str, Any]]:
    """Registered templates whose render resource exists, in registry order."""
    return [
        {"id": spec.template_id, "name": spec.display_name, "description": spec.description}
        for spec in TEMPLATE_REGISTRY.values()
        if store.exists(spec.template_id)
    ]
