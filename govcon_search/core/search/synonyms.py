"""
Synonym Table
Static term -> related terms mapping used for semantic query expansion
"""
from typing import Dict, List, Mapping, Optional


DEFAULT_SYNONYMS: Dict[str, List[str]] = {
    # AI & Machine Learning
    "ai": ["artificial intelligence", "machine learning", "ml", "deep learning", "neural networks", "llm",
           "large language model", "chatbot", "automation", "intelligent", "cognitive", "nlp",
           "natural language processing"],
    "llm": ["large language model", "language model", "ai", "artificial intelligence", "gpt", "transformer",
            "chatbot", "conversational ai", "nlp", "text generation"],
    "gpt": ["generative pre-trained transformer", "large language model", "llm", "ai", "chatbot", "text generation"],
    "chatbot": ["conversational ai", "virtual assistant", "ai assistant", "chat agent", "automated chat", "llm"],
    "nlp": ["natural language processing", "text analysis", "language understanding", "ai", "machine learning"],
    "ml": ["machine learning", "artificial intelligence", "ai", "predictive analytics", "data science", "algorithms"],
    "automation": ["ai", "machine learning", "robotic process automation", "rpa", "workflow automation",
                   "intelligent automation"],
    "neural": ["neural networks", "deep learning", "ai", "machine learning", "artificial neural networks"],
    "transformer": ["transformer model", "attention mechanism", "llm", "gpt", "bert", "neural networks"],
    "agentic": ["autonomous agents", "ai agents", "intelligent agents", "agent-based systems", "multi-agent"],
    "agent": ["ai agent", "intelligent agent", "autonomous agent", "software agent", "agentic"],
    "autonomous": ["self-driving", "independent", "automated", "agentic", "ai-powered"],
    "reasoning": ["logical reasoning", "ai reasoning", "cognitive reasoning", "inference", "decision making"],
    "prompt": ["prompt engineering", "prompt design", "ai prompting", "llm prompts", "conversational design"],
    "rag": ["retrieval augmented generation", "knowledge retrieval", "ai retrieval", "context retrieval"],
    "embedding": ["vector embeddings", "text embeddings", "semantic embeddings", "vector search"],

    # Coaching & Development
    "coaching": ["mentoring", "guidance", "development", "leadership coaching", "executive coaching",
                 "life coaching", "career coaching", "professional development"],
    "mentor": ["coaching", "mentoring", "guidance", "advisor", "counselor", "development"],
    "counseling": ["therapy", "psychological services", "mental health", "counselor", "therapist",
                   "guidance counseling"],
    "therapy": ["counseling", "psychological treatment", "mental health services", "therapeutic services"],
    "personal": ["individual", "self-development", "personal growth", "self-improvement", "life skills"],
    "development": ["growth", "improvement", "training", "advancement", "progression", "enhancement",
                    "capacity building"],
    "leadership": ["management", "executive", "supervision", "team leadership", "organizational leadership"],
    "executive": ["leadership", "c-suite", "senior management", "strategic leadership", "business leadership"],

    # Soft Skills
    "soft skills": ["interpersonal skills", "communication skills", "emotional intelligence", "social skills",
                    "people skills"],
    "communication": ["interpersonal", "presentation", "public speaking", "written communication",
                      "verbal communication"],
    "emotional": ["emotional intelligence", "eq", "self-awareness", "empathy", "social awareness"],
    "resilience": ["adaptability", "stress management", "coping skills", "mental toughness",
                   "psychological resilience"],
    "mindfulness": ["meditation", "awareness", "mindful practice", "stress reduction", "mental wellness"],
    "wellness": ["well-being", "mental health", "employee wellness", "workplace wellness", "health promotion"],
    "burnout": ["stress management", "work-life balance", "employee wellness", "mental health", "resilience"],
    "engagement": ["employee engagement", "motivation", "involvement", "participation", "commitment"],

    # Technology
    "software": ["application", "system", "platform", "tool", "program", "digital", "technology", "code"],
    "code": ["programming", "software development", "coding", "development", "software engineering"],
    "programming": ["coding", "software development", "development", "software engineering", "code"],
    "coding": ["programming", "software development", "development"],
    "it": ["information technology", "computer", "tech", "digital", "system", "network"],
    "tech": ["technology", "information technology", "it", "digital", "computer", "technical"],
    "cyber": ["cybersecurity", "security", "information assurance", "network security", "digital security"],
    "cybersecurity": ["cyber security", "information security", "network security"],
    "cloud": ["aws", "azure", "gcp", "hosting", "saas", "paas", "iaas", "computing", "cloud computing"],
    "api": ["application programming interface", "web service", "integration", "software interface"],
    "data": ["analytics", "big data", "data science", "database", "information"],
    "database": ["data management", "sql", "nosql", "data storage"],
    "data science": ["analytics", "big data", "machine learning", "statistics"],
    "it support": ["technical support", "help desk", "information technology"],

    # Web & Software Development
    "web development": ["website development", "web application", "frontend", "backend", "full stack",
                        "html", "css", "javascript", "react", "angular", "vue"],
    "web dev": ["web development", "website development", "web application"],
    "website": ["web development", "web application", "frontend", "ui/ux"],
    "software development": ["programming", "coding", "software engineering", "application development",
                             "custom software"],
    "app development": ["application development", "software development", "mobile development"],

    # Professional Services
    "consulting": ["advisory", "professional services", "expertise", "guidance", "consultation"],
    "advisory": ["consulting", "guidance", "expert advice", "consultation", "recommendations"],
    "training": ["education", "instruction", "learning", "development", "course", "workshop", "curriculum"],
    "workshop": ["training", "seminar", "course", "learning session", "educational event"],
    "curriculum": ["training program", "educational content", "course design", "learning materials"],
    "facilitation": ["workshop facilitation", "meeting facilitation", "group facilitation",
                     "process facilitation"],
    "support": ["assistance", "help", "service", "technical support", "customer support"],
    "management": ["administration", "oversight", "coordination", "leadership", "supervision"],
    "project management": ["pm", "agile", "scrum", "program management"],
    "agile": ["scrum", "project management", "software development"],

    # Human Resources & Organizational
    "hr": ["human resources", "personnel", "people operations", "human capital", "workforce"],
    "talent": ["human capital", "workforce", "personnel", "employee development", "talent management"],
    "performance": ["performance management", "evaluation", "assessment", "review", "appraisal"],
    "assessment": ["evaluation", "testing", "measurement", "analysis", "review"],
    "organizational": ["corporate", "enterprise", "institutional", "company-wide", "organization"],
    "culture": ["organizational culture", "workplace culture", "company culture", "cultural change"],
    "change": ["transformation", "organizational change", "change management", "transition"],

    # Healthcare
    "medical": ["health", "healthcare", "clinical", "patient", "hospital"],
    "health": ["healthcare", "medical", "wellness", "well-being", "health services"],
    "mental health": ["psychological services", "counseling", "therapy", "behavioral health", "wellness"],
    "behavioral": ["psychological", "mental health", "behavior modification", "behavioral science"],

    # Security & Defense
    "security": ["protection", "safety", "defense", "surveillance", "cybersecurity"],
    "defense": ["military", "army", "navy", "air force", "dod", "security"],

    # Research & Innovation
    "research": ["r&d", "study", "analysis", "investigation", "innovation", "academic research"],
    "innovation": ["research", "development", "invention", "creative solutions", "breakthrough"],
    "analysis": ["research", "study", "evaluation", "assessment", "data analysis"],

    # Government Agencies
    "dod": ["department of defense", "defense", "military"],
    "va": ["veterans affairs", "veterans administration", "veteran services"],
    "dhs": ["homeland security", "department of homeland security", "security"],
    "gsa": ["general services administration", "government services"],
    "nasa": ["space", "aerospace", "space exploration"],
    "nih": ["national institutes of health", "health research", "medical research"],
    "doe": ["department of energy", "energy", "renewable energy"],
    "epa": ["environmental protection agency", "environment", "environmental"],
}


class SynonymTable:
    """
    Term expansion over a static mapping

    Keys match a term exactly, or when either one is a substring of the
    other ("cybersecurity" reaches "cyber", "web" reaches "web development").
    """

    def __init__(self, mapping: Optional[Mapping[str, List[str]]] = None):
        source = DEFAULT_SYNONYMS if mapping is None else mapping
        self._mapping: Dict[str, List[str]] = {
            key.strip().lower(): [value.strip().lower() for value in values]
            for key, values in source.items()
        }

    def __len__(self) -> int:
        return len(self._mapping)

    def __contains__(self, term: str) -> bool:
        return term.strip().lower() in self._mapping

    def expand(self, term: str) -> List[str]:
        """
        Expand a term into itself plus related terms

        Args:
            term: Search term (any case)

        Returns:
            [term, *exact-key expansions, *containment-key expansions], deduplicated
        """
        term = term.strip().lower()
        if not term:
            return []

        terms = [term]
        terms.extend(self._mapping.get(term, []))

        for key, values in self._mapping.items():
            if key == term:
                continue
            if key in term or term in key:
                terms.extend(values)

        # dict preserves first-seen order
        return list(dict.fromkeys(terms))


default_table = SynonymTable()


def expand(term: str) -> List[str]:
    """Expand a term with the default synonym table"""
    return default_table.expand(term)
