"""
api/sample_questions.py - 문제 은행 파일이 없을 때 쓰는 내장 샘플 문제
"""

from tet_practice_cbt.models.question_model import Option, Question

SUBJECT_NAMES = {
    "sub_child": "Child Development",
    "sub_tamil": "Tamil",
    "sub_eng": "English",
    "sub_math": "Mathematics",
    "sub_evs": "Environmental Science",
    "sub_sci": "Science",
    "sub_soc": "Social Science",
    "sub_c3_tamil1": "Tamil Part I",
    "sub_c3_math": "Mathematics",
}

SAMPLE_QUESTIONS = [
    Question(
        id="q1",
        subject_id="sub_math",
        topic_id="top_num",
        text="What is the place value of 5 in 1524?",
        difficulty="easy",
        tags=["basic"],
        category="1",
        explanation="The digit 5 is in the hundreds place. So 5 * 100 = 500.",
        options=[
            Option(id="o1", text="5"),
            Option(id="o2", text="50"),
            Option(id="o3", text="500", is_correct=True),
            Option(id="o4", text="5000"),
        ],
    ),
    Question(
        id="q2",
        subject_id="sub_child",
        topic_id="top_growth",
        text="Who is known as the father of Child Psychology?",
        difficulty="medium",
        tags=["psychology", "theory"],
        category="all",
        explanation="Jean Piaget is often referred to as the father of child psychology.",
        options=[
            Option(id="o1", text="Jean Piaget", is_correct=True),
            Option(id="o2", text="Vygotsky"),
            Option(id="o3", text="Skinner"),
            Option(id="o4", text="Freud"),
        ],
    ),
    Question(
        id="q3",
        subject_id="sub_sci",
        text="What is the chemical formula for water?",
        difficulty="easy",
        tags=["chemistry"],
        category="2",
        explanation="H2O stands for 2 Hydrogen atoms and 1 Oxygen atom.",
        options=[
            Option(id="o1", text="H2O", is_correct=True),
            Option(id="o2", text="CO2"),
            Option(id="o3", text="NaCl"),
            Option(id="o4", text="O2"),
        ],
    ),
    Question(
        id="q4",
        subject_id="sub_c3_tamil1",
        topic_id="top_c3_lit",
        text="திருக்குறளை எழுதியவர் யார்?",
        difficulty="easy",
        tags=["literature"],
        category="3",
        explanation="திருவள்ளுவர்.",
        options=[
            Option(id="o1", text="கம்பர்"),
            Option(id="o2", text="திருவள்ளுவர்", is_correct=True),
            Option(id="o3", text="பாரதியார்"),
            Option(id="o4", text="ஔவையார்"),
        ],
    ),
    Question(
        id="q5",
        subject_id="sub_eng",
        topic_id="top_poet",
        text="Which of these is a synonym of 'rapid'?",
        difficulty="easy",
        category="1",
        explanation="'Rapid' and 'swift' both mean fast.",
        options=[
            Option(id="o1", text="Slow"),
            Option(id="o2", text="Swift", is_correct=True),
            Option(id="o3", text="Heavy"),
            Option(id="o4", text="Quiet"),
        ],
    ),
    Question(
        id="q6",
        subject_id="sub_evs",
        text="Which gas do plants absorb during photosynthesis?",
        difficulty="easy",
        category="1",
        explanation="Plants take in carbon dioxide and release oxygen.",
        options=[
            Option(id="o1", text="Oxygen"),
            Option(id="o2", text="Nitrogen"),
            Option(id="o3", text="Carbon dioxide", is_correct=True),
            Option(id="o4", text="Hydrogen"),
        ],
    ),
    Question(
        id="q7",
        subject_id="sub_child",
        topic_id="top_growth",
        text="Zone of Proximal Development was proposed by",
        difficulty="hard",
        category="all",
        explanation="Lev Vygotsky introduced the Zone of Proximal Development.",
        options=[
            Option(id="o1", text="Piaget"),
            Option(id="o2", text="Vygotsky", is_correct=True),
            Option(id="o3", text="Bruner"),
            Option(id="o4", text="Kohlberg"),
        ],
    ),
    Question(
        id="q8",
        subject_id="sub_math",
        topic_id="top_num",
        text="What is the LCM of 4 and 6?",
        difficulty="medium",
        category="1",
        status="inactive",
        explanation="Multiples of 4 and 6 first meet at 12.",
        options=[
            Option(id="o1", text="10"),
            Option(id="o2", text="12", is_correct=True),
            Option(id="o3", text="24"),
        ],
    ),
]
