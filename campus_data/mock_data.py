"""Static sample data standing in for a real campus backend."""
from typing import List

from .models import (
    Announcement,
    CampusLocation,
    Course,
    Event,
    Review,
    StudentProfile,
)


ANNOUNCEMENTS: List[Announcement] = [
    Announcement(
        id=1,
        title="Library Hours Extended for Finals",
        content="The main library will be open 24/7 starting next week to help students prepare for final exams.",
        date="3 days ago",
    ),
    Announcement(
        id=2,
        title="New Student Art Gallery Opening",
        content="Come see the amazing work of our talented student artists at the new gallery in the Fine Arts building.",
        date="1 week ago",
    ),
    Announcement(
        id=3,
        title="Campus Shuttle Schedule Update",
        content="Please note the updated shuttle schedule for the holiday break, effective from December 18th.",
        date="2 weeks ago",
    ),
]

EVENTS: List[Event] = [
    Event(id=1, name="Winter Wonderland Gala", date="DEC 22", location="Student Union Ballroom"),
    Event(id=2, name="Guest Lecture: AI in Modern Society", date="JAN 10", location="Lecture Hall C"),
    Event(id=3, name="Spring Semester Club Fair", date="JAN 25", location="Main Quad"),
]

CAMPUS_GROUPS: List[str] = [
    "Debate Club",
    "Coding Crew",
    "Art & Soul Society",
    "Photography Club",
    "International Students Association",
    "Varsity Sports",
    "Drama Club",
    "Music Ensemble",
    "Volunteering Group",
    "Entrepreneurship Hub",
]

CAMPUS_ACTIVITIES: List[str] = [
    "Hackathon",
    "Art Exhibition",
    "Freshers Week",
    "Guest Lecture Series",
    "Music Fest",
    "Career Fair",
    "Sports Day",
    "Drama Production",
    "Cultural Night",
    "Startup Pitch Competition",
]

CAMPUS_LOCATIONS: List[CampusLocation] = [
    CampusLocation(
        name="Main Library",
        type="Library",
        description="Central library with quiet study floors, group study rooms and the research help desk.",
        hours="Mon-Fri 7am-11pm, Sat-Sun 9am-9pm (24/7 during finals)",
    ),
    CampusLocation(
        name="Student Union",
        type="Student Life",
        description="Food court, student organization offices, the bookstore and the ballroom.",
        hours="Daily 7am-midnight",
    ),
    CampusLocation(
        name="Tech Building",
        type="Academic",
        description="Home of the Computer Science and Engineering departments, with computer labs and maker space.",
        hours="Open 24/7 for students in the program",
    ),
    CampusLocation(
        name="Science Center",
        type="Academic",
        description="Physics, chemistry and biology teaching labs plus Lecture Hall C.",
        hours="Mon-Fri 7am-10pm, Sat 9am-5pm",
    ),
    CampusLocation(
        name="Recreation Center",
        type="Recreation",
        description="Gym, indoor pool, climbing wall and group fitness studios.",
        hours="Mon-Fri 6am-11pm, Sat-Sun 8am-8pm",
    ),
]

TUTOR_SUBJECTS: List[str] = [
    "Computer Science",
    "Physics",
    "Mathematics",
    "Chemistry",
    "History",
    "English Literature",
    "Biology",
]

ALL_COURSE_CODES: List[str] = [
    "CS101", "PHYS201", "MATH300", "CHEM101", "HIST101", "ENG202", "BIO210", "ART101",
]

STUDY_STYLES: List[str] = ["Quiet", "Group", "Collaborative", "Focused", "Online"]

# The first profile is the signed-in demo user.
STUDENT_PROFILES: List[StudentProfile] = [
    StudentProfile(name="Alex Doe", major="Computer Science", courses=["CS101", "MATH300", "PHYS201"], study_style="Focused"),
    StudentProfile(name="Priya Patel", major="Computer Science", courses=["CS101", "MATH300"], study_style="Quiet"),
    StudentProfile(name="Marcus Lee", major="Physics", courses=["PHYS201", "MATH300", "CHEM101"], study_style="Group"),
    StudentProfile(name="Sofia Garcia", major="History", courses=["HIST101", "ENG202"], study_style="Collaborative"),
    StudentProfile(name="Jamal Carter", major="Biology", courses=["BIO210", "CHEM101"], study_style="Online"),
    StudentProfile(name="Emily Chen", major="Mathematics", courses=["MATH300", "CS101"], study_style="Collaborative"),
    StudentProfile(name="Noah Kim", major="Fine Arts", courses=["ART101", "ENG202"], study_style="Quiet"),
]

COURSES: List[Course] = [
    Course(
        id="cs101",
        code="CS101",
        name="Introduction to Computer Science",
        instructor="Dr. Ada Turing",
        reviews=[
            Review(id=1, author="Priya Patel", rating=5, comment="Great intro course, the labs really help the concepts stick."),
            Review(id=2, author="Emily Chen", rating=4, comment="Fast paced near the end but the TAs are very helpful."),
            Review(id=3, author="Marcus Lee", rating=3, comment="Projects take a lot of time, start them early."),
        ],
    ),
    Course(
        id="phys201",
        code="PHYS201",
        name="Classical Mechanics",
        instructor="Prof. Isaac Newton",
        reviews=[
            Review(id=4, author="Marcus Lee", rating=4, comment="Challenging problem sets, but the lectures are clear."),
            Review(id=5, author="Alex Doe", rating=2, comment="Exams felt much harder than the homework."),
        ],
    ),
    Course(
        id="hist101",
        code="HIST101",
        name="World History",
        instructor="Dr. Mary Beard",
        reviews=[
            Review(id=6, author="Sofia Garcia", rating=5, comment="Engaging lectures and fair grading on the essays."),
        ],
    ),
    Course(
        id="art101",
        code="ART101",
        name="Foundations of Drawing",
        instructor="Prof. Frida Rivera",
        reviews=[],
    ),
]
