"""
Question Bank - Curated multiple-choice questions per subject and proficiency tier.
Serves as the local fallback when remote generation is unavailable; supports optional JSON load.
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from smart_tutor.engines.practice.exceptions import NoQuestionAvailable
from smart_tutor.engines.practice.types import ProficiencyTier, QuestionSource
from smart_tutor.logging_config import get_logger

logger = get_logger(__name__)


class Question(BaseModel):
    """A multiple-choice practice question. Immutable once produced."""

    model_config = ConfigDict(frozen=True)

    id: str
    subject: str  # e.g. "cpp", "python"
    tier: ProficiencyTier
    text: str
    code_example: Optional[str] = None
    options: Tuple[str, ...] = Field(min_length=2)
    correct_answer_index: int
    explanation: str
    points: int = Field(gt=0)
    topic: Optional[str] = None
    source: QuestionSource = QuestionSource.BANK
    generated_at: Optional[datetime] = None

    @model_validator(mode="after")
    def _check_correct_index(self) -> "Question":
        if not 0 <= self.correct_answer_index < len(self.options):
            raise ValueError(
                f"correct_answer_index {self.correct_answer_index} out of range "
                f"for {len(self.options)} options"
            )
        return self


Pools = Dict[str, Dict[ProficiencyTier, List[Question]]]


CPP_QUESTIONS: Dict[ProficiencyTier, List[Question]] = {
    ProficiencyTier.BASIC: [
        Question(
            id="cpp_basic_1",
            subject="cpp",
            tier=ProficiencyTier.BASIC,
            text="What is the correct way to declare an integer variable in C++?",
            options=["int x;", "integer x;", "var x;", "number x;"],
            correct_answer_index=0,
            explanation="In C++, 'int' is the keyword used to declare integer variables. The syntax is 'int variableName;'",
            code_example="int age = 25;\nint count;",
            topic="Variable Declaration",
            points=10,
        ),
        Question(
            id="cpp_basic_2",
            subject="cpp",
            tier=ProficiencyTier.BASIC,
            text="Which of the following is the correct syntax for a C++ comment?",
            options=["// This is a comment", "# This is a comment", "/* This is a comment", "' This is a comment"],
            correct_answer_index=0,
            explanation="C++ uses // for single-line comments and /* */ for multi-line comments.",
            code_example="// Single line comment\n/* Multi-line\n   comment */",
            topic="Comments",
            points=10,
        ),
        Question(
            id="cpp_basic_3",
            subject="cpp",
            tier=ProficiencyTier.BASIC,
            text="What is the output of: cout << 5 + 3 << endl;",
            options=["5 + 3", "8", "53", "Error"],
            correct_answer_index=1,
            explanation="The expression 5 + 3 is evaluated first, resulting in 8, which is then printed.",
            code_example="#include <iostream>\nusing namespace std;\nint main() {\n    cout << 5 + 3 << endl;\n    return 0;\n}",
            topic="Basic Operations",
            points=10,
        ),
        Question(
            id="cpp_basic_4",
            subject="cpp",
            tier=ProficiencyTier.BASIC,
            text="Which header file is required for input/output operations in C++?",
            options=["<stdio.h>", "<iostream>", "<conio.h>", "<string.h>"],
            correct_answer_index=1,
            explanation="<iostream> is the standard header for input/output operations, providing cout, cin, endl, etc.",
            code_example="#include <iostream>\nusing namespace std;",
            topic="Header Files",
            points=10,
        ),
    ],
    ProficiencyTier.INTERMEDIATE: [
        Question(
            id="cpp_inter_1",
            subject="cpp",
            tier=ProficiencyTier.INTERMEDIATE,
            text="What will be the output of this C++ code?\nint arr[] = {1, 2, 3, 4, 5};\nint *ptr = arr + 2;\ncout << *ptr;",
            options=["1", "2", "3", "4"],
            correct_answer_index=2,
            explanation="arr + 2 moves the pointer to the third element (index 2) of the array. *ptr dereferences it to get the value 3.",
            code_example="int arr[] = {1, 2, 3, 4, 5};\nint *ptr = arr + 2;  // Points to arr[2]\ncout << *ptr;  // Outputs 3",
            topic="Pointers and Arrays",
            points=20,
        ),
        Question(
            id="cpp_inter_2",
            subject="cpp",
            tier=ProficiencyTier.INTERMEDIATE,
            text="What is the difference between ++i and i++?",
            options=[
                "No difference",
                "++i increments before use, i++ increments after use",
                "++i is faster than i++",
                "i++ can only be used in loops",
            ],
            correct_answer_index=1,
            explanation="++i (pre-increment) increments the value before using it in the expression. i++ (post-increment) uses the current value first, then increments.",
            code_example="int i = 5;\nint a = ++i;  // i=6, a=6\nint j = 5;\nint b = j++;  // j=6, b=5",
            topic="Operators",
            points=20,
        ),
        Question(
            id="cpp_inter_3",
            subject="cpp",
            tier=ProficiencyTier.INTERMEDIATE,
            text="What does passing an argument by reference (int &x) allow a function to do?",
            options=[
                "Receive a copy of the argument",
                "Modify the caller's variable directly",
                "Accept only constant values",
                "Allocate the argument on the heap",
            ],
            correct_answer_index=1,
            explanation="A reference parameter is an alias for the caller's variable, so assignments inside the function change the original.",
            code_example="void addOne(int &x) {\n    x += 1;\n}\n\nint n = 4;\naddOne(n);  // n is now 5",
            topic="References",
            points=20,
        ),
    ],
    ProficiencyTier.ADVANCED: [
        Question(
            id="cpp_adv_1",
            subject="cpp",
            tier=ProficiencyTier.ADVANCED,
            text="Which of the following demonstrates proper RAII (Resource Acquisition Is Initialization) in C++?",
            options=[
                "Using malloc() and free()",
                "Using smart pointers like unique_ptr",
                "Manual resource management",
                "Global variables for resources",
            ],
            correct_answer_index=1,
            explanation="RAII is best implemented using smart pointers like unique_ptr, shared_ptr which automatically manage resource lifetime through constructors and destructors.",
            code_example="std::unique_ptr<int[]> data(new int[100]);\n// Automatically deallocated when out of scope",
            topic="RAII and Smart Pointers",
            points=30,
        ),
        Question(
            id="cpp_adv_2",
            subject="cpp",
            tier=ProficiencyTier.ADVANCED,
            text="Why should a base class intended for polymorphic use declare a virtual destructor?",
            options=[
                "To make the class abstract",
                "So deleting a derived object through a base pointer runs the derived destructor",
                "To prevent the class from being copied",
                "Virtual destructors are faster",
            ],
            correct_answer_index=1,
            explanation="Without a virtual destructor, deleting a derived object through a base-class pointer is undefined behaviour and typically skips the derived destructor.",
            code_example="struct Base {\n    virtual ~Base() = default;\n};\nstruct Derived : Base {\n    ~Derived() override { /* cleanup */ }\n};",
            topic="Virtual Destructors",
            points=30,
        ),
    ],
}


JAVA_QUESTIONS: Dict[ProficiencyTier, List[Question]] = {
    ProficiencyTier.BASIC: [
        Question(
            id="java_basic_1",
            subject="java",
            tier=ProficiencyTier.BASIC,
            text="Which method is the entry point of a standalone Java application?",
            options=[
                "public void start()",
                "public static void main(String[] args)",
                "static int run()",
                "public main()",
            ],
            correct_answer_index=1,
            explanation="The JVM starts a Java program by calling public static void main(String[] args) on the launched class.",
            code_example="public class Hello {\n    public static void main(String[] args) {\n        System.out.println(\"Hello\");\n    }\n}",
            topic="Program Structure",
            points=10,
        ),
        Question(
            id="java_basic_2",
            subject="java",
            tier=ProficiencyTier.BASIC,
            text="Which keyword declares a variable whose value cannot be reassigned?",
            options=["const", "static", "final", "immutable"],
            correct_answer_index=2,
            explanation="'final' prevents reassignment of a variable after it has been initialised. 'const' is reserved but unused in Java.",
            code_example="final int MAX_USERS = 100;",
            topic="Variables",
            points=10,
        ),
        Question(
            id="java_basic_3",
            subject="java",
            tier=ProficiencyTier.BASIC,
            text="What is the result of 7 / 2 when both operands are int?",
            options=["3.5", "3", "4", "Compilation error"],
            correct_answer_index=1,
            explanation="Integer division in Java truncates toward zero, so 7 / 2 evaluates to 3.",
            code_example="int result = 7 / 2;  // 3",
            topic="Operators",
            points=10,
        ),
    ],
    ProficiencyTier.INTERMEDIATE: [
        Question(
            id="java_inter_1",
            subject="java",
            tier=ProficiencyTier.INTERMEDIATE,
            text="What does s1 == s2 compare when s1 and s2 are String objects?",
            options=[
                "Their character contents",
                "Their object references",
                "Their lengths",
                "Their hash codes",
            ],
            correct_answer_index=1,
            explanation="== compares references for objects. Use equals() to compare string contents.",
            code_example="String a = new String(\"hi\");\nString b = new String(\"hi\");\na == b;       // false\na.equals(b);  // true",
            topic="String Comparison",
            points=20,
        ),
        Question(
            id="java_inter_2",
            subject="java",
            tier=ProficiencyTier.INTERMEDIATE,
            text="Which collection should you choose for fast lookups by key?",
            options=["ArrayList", "LinkedList", "HashMap", "Stack"],
            correct_answer_index=2,
            explanation="HashMap offers average O(1) get/put by key, while lists require a linear search.",
            code_example="Map<String, Integer> ages = new HashMap<>();\nages.put(\"Ada\", 36);\nages.get(\"Ada\");  // 36",
            topic="Collections",
            points=20,
        ),
    ],
    ProficiencyTier.ADVANCED: [
        Question(
            id="java_adv_1",
            subject="java",
            tier=ProficiencyTier.ADVANCED,
            text="What does the volatile keyword guarantee for a field shared between threads?",
            options=[
                "Atomic compound operations like count++",
                "Visibility of writes to other threads",
                "Mutual exclusion for the field",
                "That the field is never cached by the JIT",
            ],
            correct_answer_index=1,
            explanation="volatile guarantees that a write by one thread is visible to subsequent reads by other threads, but it does not make compound operations atomic.",
            code_example="private volatile boolean running = true;\n\npublic void stop() {\n    running = false;\n}",
            topic="Concurrency",
            points=30,
        ),
        Question(
            id="java_adv_2",
            subject="java",
            tier=ProficiencyTier.ADVANCED,
            text="If you override equals() in a class, which other method must you also override?",
            options=["toString()", "hashCode()", "compareTo()", "clone()"],
            correct_answer_index=1,
            explanation="Equal objects must have equal hash codes, otherwise hash-based collections such as HashMap and HashSet behave incorrectly.",
            code_example="@Override\npublic int hashCode() {\n    return Objects.hash(id, name);\n}",
            topic="Object Contracts",
            points=30,
        ),
    ],
}


PYTHON_QUESTIONS: Dict[ProficiencyTier, List[Question]] = {
    ProficiencyTier.BASIC: [
        Question(
            id="python_basic_1",
            subject="python",
            tier=ProficiencyTier.BASIC,
            text="How do you create a list in Python?",
            options=["list = []", "list = ()", "list = {}", "list = <>"],
            correct_answer_index=0,
            explanation="Square brackets [] are used to create lists in Python. Lists are ordered, mutable collections that can hold different data types.",
            code_example="my_list = [1, 2, 3, 'hello']\nempty_list = []",
            topic="Data Structures",
            points=10,
        ),
        Question(
            id="python_basic_2",
            subject="python",
            tier=ProficiencyTier.BASIC,
            text="Which of the following is the correct way to print in Python 3?",
            options=["print 'Hello'", "print('Hello')", "echo 'Hello'", "console.log('Hello')"],
            correct_answer_index=1,
            explanation="In Python 3, print is a function and requires parentheses: print('text')",
            code_example="print('Hello, World!')\nprint('Python', 'is', 'awesome')",
            topic="Basic Syntax",
            points=10,
        ),
        Question(
            id="python_basic_3",
            subject="python",
            tier=ProficiencyTier.BASIC,
            text="What is the correct way to define a function in Python?",
            options=["function myFunc():", "def myFunc():", "func myFunc():", "define myFunc():"],
            correct_answer_index=1,
            explanation="Python uses the 'def' keyword to define functions, followed by the function name and parentheses.",
            code_example="def greet(name):\n    return f'Hello, {name}!'",
            topic="Functions",
            points=10,
        ),
    ],
    ProficiencyTier.INTERMEDIATE: [
        Question(
            id="python_inter_1",
            subject="python",
            tier=ProficiencyTier.INTERMEDIATE,
            text="What is the output of this Python code?\ndef func(lst=[]):\n    lst.append(1)\n    return lst\n\nprint(func())\nprint(func())",
            options=["[1] [1]", "[1] [1, 1]", "Error", "[] []"],
            correct_answer_index=1,
            explanation="This demonstrates the mutable default argument trap. The default list is shared between function calls, so each call appends to the same list.",
            code_example="# Correct way:\ndef func(lst=None):\n    if lst is None:\n        lst = []\n    lst.append(1)\n    return lst",
            topic="Function Default Arguments",
            points=20,
        ),
        Question(
            id="python_inter_2",
            subject="python",
            tier=ProficiencyTier.INTERMEDIATE,
            text="What does the expression [x * 2 for x in range(3)] evaluate to?",
            options=["[0, 2, 4]", "[2, 4, 6]", "[0, 1, 2]", "(0, 2, 4)"],
            correct_answer_index=0,
            explanation="range(3) yields 0, 1 and 2; the comprehension doubles each value and collects them in a list.",
            code_example="doubled = [x * 2 for x in range(3)]\nprint(doubled)  # [0, 2, 4]",
            topic="List Comprehensions",
            points=20,
        ),
    ],
    ProficiencyTier.ADVANCED: [
        Question(
            id="python_adv_1",
            subject="python",
            tier=ProficiencyTier.ADVANCED,
            text="Which Python feature allows a function to maintain state between calls without using global variables?",
            options=["Lambda functions", "Closures", "Decorators", "Generators"],
            correct_answer_index=1,
            explanation="Closures allow inner functions to access variables from the outer function's scope, maintaining state between calls even after the outer function returns.",
            code_example="def counter():\n    count = 0\n    def increment():\n        nonlocal count\n        count += 1\n        return count\n    return increment\n\nc = counter()\nprint(c())  # 1\nprint(c())  # 2",
            topic="Closures and Scope",
            points=30,
        ),
        Question(
            id="python_adv_2",
            subject="python",
            tier=ProficiencyTier.ADVANCED,
            text="What does a generator function return when it is called?",
            options=[
                "The first yielded value",
                "A list of all yielded values",
                "A generator object that produces values lazily",
                "None",
            ],
            correct_answer_index=2,
            explanation="Calling a generator function runs none of its body; it returns a generator object whose values are produced on demand by next() or iteration.",
            code_example="def squares(n):\n    for i in range(n):\n        yield i * i\n\ngen = squares(3)\nprint(next(gen))  # 0",
            topic="Generators",
            points=30,
        ),
    ],
}


class QuestionBank:
    """
    Read-only question pools keyed by (subject, tier).

    Requests for an unknown pair fall back to the default partition
    (default subject at the basic tier).
    """

    DEFAULT_POOLS: Pools = {
        "cpp": CPP_QUESTIONS,
        "java": JAVA_QUESTIONS,
        "python": PYTHON_QUESTIONS,
    }

    def __init__(
        self,
        pools: Optional[Pools] = None,
        default_subject: str = "cpp",
        default_tier: ProficiencyTier = ProficiencyTier.BASIC,
    ):
        self._pools = pools if pools is not None else self.DEFAULT_POOLS
        self.default_subject = default_subject
        self.default_tier = default_tier

    def fetch(self, subject: str, tier: ProficiencyTier) -> List[Question]:
        """Return the questions for (subject, tier), or the default partition if absent."""
        tier = ProficiencyTier(tier)
        questions = self._pools.get(subject, {}).get(tier)
        if questions:
            return list(questions)

        default = self._pools.get(self.default_subject, {}).get(self.default_tier)
        if not default:
            raise NoQuestionAvailable(subject, tier.value)
        logger.debug(
            "No partition for %s/%s; using default %s/%s",
            subject, tier.value, self.default_subject, self.default_tier.value,
        )
        return list(default)

    def supports(self, subject: str) -> bool:
        """Whether the subject has its own partitions (no default fallback needed)."""
        return any(self._pools.get(subject, {}).values())

    def subjects(self) -> List[str]:
        return [s for s in self._pools if self.supports(s)]

    def tiers(self, subject: str) -> List[ProficiencyTier]:
        """Tiers that have at least one question for the subject, in tier order."""
        partitions = self._pools.get(subject, {})
        return [t for t in ProficiencyTier if partitions.get(t)]

    @classmethod
    def _parse_question_dict(
        cls,
        d: dict,
        subject: str,
        tier: ProficiencyTier,
    ) -> Optional[Question]:
        """Convert a JSON dict to Question; returns None if invalid."""
        try:
            return Question(
                id=str(d["id"]),
                subject=subject,
                tier=tier,
                text=str(d.get("text") or d.get("question", "")),
                code_example=d.get("code_example") or d.get("codeExample"),
                options=d.get("options"),
                correct_answer_index=int(d.get("correct_answer_index", d.get("correctAnswer"))),
                explanation=str(d.get("explanation", "")),
                points=int(d.get("points", 10)),
                topic=d.get("topic"),
            )
        except (ValidationError, ValueError, KeyError, TypeError):
            return None

    @classmethod
    def from_json(
        cls,
        path: Union[str, Path],
        default_subject: str = "cpp",
    ) -> "QuestionBank":
        """
        Load pools from a JSON file shaped {subject: {tier: [question, ...]}}.

        Entries that do not parse into a valid Question are skipped. A missing or
        unreadable file yields an empty bank, so fetch() raises NoQuestionAvailable.
        """
        path = Path(path)
        pools: Pools = {}
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as exc:
            logger.warning("Could not load question bank from %s: %s", path, exc)
            return cls(pools={}, default_subject=default_subject)

        if not isinstance(data, dict):
            return cls(pools={}, default_subject=default_subject)

        skipped = 0
        for subject, partitions in data.items():
            if not isinstance(partitions, dict):
                continue
            for tier_name, entries in partitions.items():
                try:
                    tier = ProficiencyTier(tier_name)
                except ValueError:
                    continue
                for d in entries if isinstance(entries, list) else []:
                    q = cls._parse_question_dict(d, subject, tier) if isinstance(d, dict) else None
                    if q:
                        pools.setdefault(subject, {}).setdefault(tier, []).append(q)
                    else:
                        skipped += 1

        if skipped:
            logger.warning("Skipped %d invalid question entries in %s", skipped, path)
        return cls(pools=pools, default_subject=default_subject)
